"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from backend.catalog.models import ItemType, Material, Item, HolderType
from backend.locations.models import Company, Location
from backend.parties.models import Party
from backend.purchasing.models import PurchaseIndent, PurchaseIndentItem, PurchaseOrder, PurchaseOrderItem
from backend.inventory.models import Movement, JobWork
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', is_staff=False, is_superuser=False):
        """Create a test user"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        return User.objects.create_user(
            username=username,
            email=email,
            password=password,
            is_staff=is_staff,
            is_superuser=is_superuser
        )

    @staticmethod
    def create_company(name=None):
        if not name:
            name = f'Company_{TestDataFactory.random_string(6)}'
        return Company.objects.create(name=name)

    @staticmethod
    def create_location(name=None, company=None):
        """Create a test storage location"""
        if not name:
            name = f'Location_{TestDataFactory.random_string(6)}'
        if not company:
            company = TestDataFactory.create_company()
        return Location.objects.create(name=name, company=company, address=f'Test Address {name}')

    @staticmethod
    def create_party(name=None, code=None):
        """Create a test vendor / job-worker"""
        if not name:
            name = f'Party_{TestDataFactory.random_string(6)}'
        if not code:
            code = f'PTY_{TestDataFactory.random_string(6).upper()}'
        return Party.objects.create(name=name, code=code, phone='1234567890')

    @staticmethod
    def create_item_type(name=None):
        if not name:
            name = f'Type_{TestDataFactory.random_string(6)}'
        return ItemType.objects.create(name=name)

    @staticmethod
    def create_material(name=None):
        if not name:
            name = f'Material_{TestDataFactory.random_string(6)}'
        return Material.objects.create(name=name)

    @staticmethod
    def create_item(name=None, item_type=None, holder_type=HolderType.NOT_IN_STOCK, location=None, party=None, is_active=True):
        """Create a test die/pattern with the given holder"""
        if not name:
            name = f'Die_{TestDataFactory.random_string(6)}'
        if not item_type:
            item_type = TestDataFactory.create_item_type()
        return Item.objects.create(
            main_part_name=f'MP_{name}_{TestDataFactory.random_string(4)}',
            current_name=name,
            item_type=item_type,
            current_holder_type=holder_type,
            current_location=location,
            current_party=party,
            is_active=is_active
        )

    @staticmethod
    def create_purchase_indent(items=None, status=PurchaseIndent.STATUS_PENDING, is_active=True, user=None):
        """Create a test purchase indent with one line per item"""
        indent = PurchaseIndent.objects.create(
            pi_no=f'PI-{TestDataFactory.random_string(8).upper()}',
            status=status,
            is_active=is_active,
            created_by=user
        )
        for item in items or []:
            PurchaseIndentItem.objects.create(purchase_indent=indent, item=item)
        return indent

    @staticmethod
    def create_purchase_order(indent_items, vendor=None, is_active=True, user=None):
        """Create a test purchase order over the given indent lines"""
        if not vendor:
            vendor = TestDataFactory.create_party()
        order = PurchaseOrder.objects.create(
            po_no=f'PO-{TestDataFactory.random_string(8).upper()}',
            vendor=vendor,
            is_active=is_active,
            created_by=user
        )
        for indent_item in indent_items:
            PurchaseOrderItem.objects.create(purchase_order=order, purchase_indent_item=indent_item)
        return order

    @staticmethod
    def create_movement(item, movement_type=Movement.TYPE_INWARD, to_location=None, is_qc_pending=False, purchase_order=None):
        """Create a test movement into a location"""
        if not to_location:
            to_location = TestDataFactory.create_location()
        return Movement.objects.create(
            movement_no=f'MOV-{TestDataFactory.random_string(8).upper()}',
            item=item,
            movement_type=movement_type,
            to_type=HolderType.LOCATION,
            to_location=to_location,
            purchase_order=purchase_order,
            is_qc_pending=is_qc_pending
        )

    @staticmethod
    def create_job_work(item, status='pending'):
        return JobWork.objects.create(
            job_work_no=f'JW-{TestDataFactory.random_string(8).upper()}',
            item=item,
            status=status
        )
