from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from .models import RoomAllocation
from .services import update_room_occupancy


@receiver(post_save, sender=RoomAllocation)
@receiver(post_delete, sender=RoomAllocation)
def refresh_room_occupancy(sender, instance, raw=False, **kwargs):
    """
    Update room occupancy when allocations change.
    """
    if raw:
        return
    update_room_occupancy(instance.room)
