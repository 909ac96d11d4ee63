from clubhub.repositories.user_repository import UserRepository
from clubhub.repositories.event_repository import EventRepository
from clubhub.repositories.registration_repository import RegistrationRepository
from clubhub.repositories.class_repository import ClassRepository
from clubhub.repositories.roster_repository import RosterRepository
