from flask import current_app, render_template
from flask_mail import Message, Mail
from threading import Thread
from datetime import datetime, timezone

mail = Mail()


def send_async_email(app, msg):
    with app.app_context():
        try:
            mail.send(msg)
        except Exception as e:
            app.logger.error(f"Failed to send email: {e}")


def send_registration_receipt_email(recipient, club_name, event_name, attendee_count):
    """Receipt for a submitted club registration. Delivery failures are only logged."""
    app = current_app._get_current_object()
    subject = f"Registration received: {event_name}"

    # If in testing mode, log the email instead of sending it
    if app.testing:
        app.logger.info("--- MOCK EMAIL ---")
        app.logger.info(f"To: {recipient}")
        app.logger.info(f"Subject: {subject}")
        app.logger.info(
            f"Body: {club_name} is registered for {event_name} with {attendee_count} attendee(s)."
        )
        app.logger.info("--- END MOCK EMAIL ---")
        return

    if not app.config.get("MAIL_SERVER"):
        app.logger.warning(f"MAIL_SERVER not configured, skipping receipt for {recipient}")
        return

    msg = Message(
        subject,
        sender=("Club Hub", app.config.get("MAIL_USERNAME")),
        recipients=[recipient],
    )

    msg.html = render_template(
        "email/registration_receipt.html",
        club_name=club_name,
        event_name=event_name,
        attendee_count=attendee_count,
        portal_url=app.config.get("CLIENT_URL"),
        current_year=datetime.now(timezone.utc).year,
    )

    Thread(target=send_async_email, args=(app, msg)).start()
