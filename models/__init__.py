from .document import Document, utc_now
from .product import Product
from .post import BlogPost
from .category import Category
from .deal import Deal
from .click_event import ClickEvent
from .admin_profile import AdminProfile
from .identity import AdminIdentity
