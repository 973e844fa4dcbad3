from billing.models.user import User
from billing.models.team import Team
from billing.models.plan import Plan
from billing.models.subscription import Subscription
from billing.models.order import Order
from billing.models.subscription_activation import SubscriptionActivation
