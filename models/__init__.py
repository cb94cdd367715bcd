from models.users import User
from models.restaurants import Restaurant
from models.tables import Table
from models.menu_items import MenuItem
from models.orders import Order
from models.order_items import OrderItem
from models.order_status_events import OrderStatusEvent
from models.payment_links import PaymentLink
from models.push_subscriptions import PushSubscription

__all__ = ["User", "Restaurant", "Table", "MenuItem", "Order", "OrderItem",
           "OrderStatusEvent", "PaymentLink", "PushSubscription"]
