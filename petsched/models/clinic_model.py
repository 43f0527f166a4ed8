import enum

from petsched import db


class SubscriptionTier(enum.Enum):
    BASIC = 'basic'
    PROFESSIONAL = 'professional'
    ENTERPRISE = 'enterprise'


class SubscriptionStatus(enum.Enum):
    ACTIVE = 'active'
    SUSPENDED = 'suspended'
    CANCELLED = 'cancelled'


class Clinic(db.Model):
    __tablename__ = 'clinics'
    __table_args__ = (
        db.CheckConstraint("subscription_tier IN ('basic', 'professional', 'enterprise')",
                           name='ck_clinics_subscription_tier'),
        db.CheckConstraint("subscription_status IN ('active', 'suspended', 'cancelled')",
                           name='ck_clinics_subscription_status'),
    )
    id = db.Column(db.String(36), primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    address = db.Column(db.String(255))
    phone = db.Column(db.String(50))
    email = db.Column(db.String(255))
    website = db.Column(db.String(255))
    subscription_tier = db.Column(db.String(20), default=SubscriptionTier.BASIC.value,
                                  server_default=SubscriptionTier.BASIC.value)
    subscription_status = db.Column(db.String(20), default=SubscriptionStatus.ACTIVE.value,
                                    server_default=SubscriptionStatus.ACTIVE.value)
    stripe_customer_id = db.Column(db.String(255))
    stripe_subscription_id = db.Column(db.String(255), index=True)
    created_at = db.Column(db.DateTime, server_default=db.func.current_timestamp())
    updated_at = db.Column(db.DateTime, server_default=db.func.current_timestamp())

    def __repr__(self):
        return f'<Clinic {self.name} ({self.subscription_tier})>'
