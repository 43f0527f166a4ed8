from petsched import db


class WebhookEvent(db.Model):
    """Stripe events already applied, keyed by the Stripe event id."""
    __tablename__ = 'webhook_events'
    id = db.Column(db.String(255), primary_key=True)
    type = db.Column(db.String(100), nullable=False)
    received_at = db.Column(db.DateTime, server_default=db.func.current_timestamp())
