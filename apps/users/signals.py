from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import User
from .services import IdentityBridge


@receiver(post_save, sender=User)
def bridge_new_user(sender, instance, created, raw=False, **kwargs):
    """Create the profile (and student row) of every newly signed-up user."""
    if created and not raw:
        IdentityBridge.handle_new_user(instance)
