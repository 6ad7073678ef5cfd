from .users import User, CustomerProfile, AdminProfile, SessionToken
from .brands import Brand, Product
from .content import File, Review
from .pages import LandingPage, Block
from .qr import QRCode, ScanLog

__all__ = [
    'User', 'CustomerProfile', 'AdminProfile', 'SessionToken',
    'Brand', 'Product',
    'File', 'Review',
    'LandingPage', 'Block',
    'QRCode', 'ScanLog',
]
