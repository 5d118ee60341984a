"""
Django management command to print the resolved process state of items
"""
from django.core.management.base import BaseCommand, CommandError

from backend.catalog.models import Item
from backend.inventory.item_state import ItemProcessState, resolve_state, get_state_display
from backend.reports.summary import item_state_summary, inventory_status


class Command(BaseCommand):
    help = 'Show the resolved process state of every item (or one item) and per-state counts'

    def add_arguments(self, parser):
        parser.add_argument(
            '--item-id',
            type=int,
            help='Resolve a single item only',
        )
        parser.add_argument(
            '--exclude-indent',
            type=int,
            help='Purchase indent ID to ignore in the PI check',
        )
        parser.add_argument(
            '--only-state',
            choices=ItemProcessState.values,
            help='Show only items in this state',
        )
        parser.add_argument(
            '--summary',
            action='store_true',
            help='Show per-state counts instead of the item listing',
        )

    def handle(self, *args, **options):
        item_id = options.get('item_id')
        exclude_indent = options.get('exclude_indent')

        if options.get('summary'):
            self.show_summary()
            return

        if item_id is not None:
            item = Item.objects.filter(pk=item_id).first()
            if item is None:
                raise CommandError(f"Item {item_id} does not exist")
            state = resolve_state(item_id, exclude_purchase_indent_id=exclude_indent)
            self.stdout.write(f"{item.current_name} ({item.main_part_name}): {state.value} - {get_state_display(state)}")
            return

        rows = inventory_status(state=options.get('only_state'), exclude_purchase_indent_id=exclude_indent)
        self.stdout.write("=" * 80)
        self.stdout.write(self.style.SUCCESS("ITEM PROCESS STATES"))
        self.stdout.write("=" * 80)
        for row in rows:
            holder = f" @ {row['holder_name']}" if row['holder_name'] else ""
            self.stdout.write(f"[{row['item_id']}] {row['current_name']} ({row['main_part_name']}): {row['status_display']}{holder}")
        self.stdout.write("")
        self.stdout.write(f"Items listed: {len(rows)}")

    def show_summary(self):
        counts = item_state_summary()
        self.stdout.write("=" * 80)
        self.stdout.write(self.style.SUCCESS("ITEM STATE SUMMARY"))
        self.stdout.write("=" * 80)
        for state in ItemProcessState:
            self.stdout.write(f"  {state.label:<15} {counts[state.value]}")
        self.stdout.write(f"  {'Total':<15} {counts['total']}")
