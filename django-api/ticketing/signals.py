"""Django signals for cache invalidation.

Tier listings carry sold counts, so any change to an event's tiers or tickets
drops the cached listing for that event.
"""

from django.core.cache import cache
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from ticketing.cache_keys import tiers_cache_key
from ticketing.models import Event, Ticket, TicketTier


@receiver([post_save, post_delete], sender=Event)
def invalidate_event_cache(sender, instance, **kwargs):
    """Invalidate caches when an event is saved or deleted."""
    cache.delete(tiers_cache_key(str(instance.pk)))


@receiver([post_save, post_delete], sender=TicketTier)
def invalidate_tier_cache(sender, instance, **kwargs):
    """Invalidate caches when a ticket tier is saved or deleted."""
    cache.delete(tiers_cache_key(str(instance.event_id)))


@receiver([post_save, post_delete], sender=Ticket)
def invalidate_ticket_cache(sender, instance, **kwargs):
    """Invalidate caches when a ticket changes, since inventory moves with it."""
    cache.delete(tiers_cache_key(str(instance.event_id)))
