from django.db import models
from backend.locations.models import Location
from backend.parties.models import Party


class HolderType(models.TextChoices):
    """Custodial classification of an item"""
    NOT_IN_STOCK = 'NotInStock', 'Not in stock'
    VENDOR = 'Vendor', 'Vendor'
    LOCATION = 'Location', 'Location'


class ItemType(models.Model):
    """Item types (Die, Pattern, ...)"""
    name = models.CharField(max_length=100, unique=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'item_types'


class Material(models.Model):
    """Material master"""
    name = models.CharField(max_length=100, unique=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'materials'


class Item(models.Model):
    """A physical die or pattern tracked through its lifecycle"""
    main_part_name = models.CharField(max_length=200, unique=True)  # Permanent, never edited
    current_name = models.CharField(max_length=200, db_index=True)
    item_type = models.ForeignKey(ItemType, on_delete=models.PROTECT, related_name='items')
    material = models.ForeignKey(Material, on_delete=models.SET_NULL, null=True, blank=True, related_name='items')
    drawing_no = models.CharField(max_length=100, unique=True, blank=True, null=True)
    revision_no = models.CharField(max_length=50, blank=True)
    # Last-known custody; pipeline presence (PO, PI, QC, job-work) is derived, not stored
    current_holder_type = models.CharField(max_length=20, choices=HolderType.choices, default=HolderType.NOT_IN_STOCK)
    current_location = models.ForeignKey(Location, on_delete=models.SET_NULL, null=True, blank=True, related_name='items')
    current_party = models.ForeignKey(Party, on_delete=models.SET_NULL, null=True, blank=True, related_name='items')
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.current_name} ({self.main_part_name})"

    @property
    def holder_name(self):
        """Name of whoever currently holds the item, if anyone"""
        if self.current_holder_type == HolderType.LOCATION and self.current_location:
            return self.current_location.name
        if self.current_holder_type == HolderType.VENDOR and self.current_party:
            return self.current_party.name
        return None

    def place_at_location(self, location):
        self.current_holder_type = HolderType.LOCATION
        self.current_location = location
        self.current_party = None
        self.save(update_fields=['current_holder_type', 'current_location', 'current_party', 'updated_at'])

    def send_to_party(self, party):
        self.current_holder_type = HolderType.VENDOR
        self.current_party = party
        self.current_location = None
        self.save(update_fields=['current_holder_type', 'current_location', 'current_party', 'updated_at'])

    class Meta:
        db_table = 'items'
        ordering = ['current_name']
        indexes = [
            models.Index(fields=['current_holder_type'], name='idx_item_holder_type'),
        ]
