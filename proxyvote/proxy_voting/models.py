from django.db import models


class StoreEntry(models.Model):
    """
    One entry of the election's durable key-value store.
    e.g. key "votes:PartyA" -> value 3
    """
    key = models.CharField(max_length=255, unique=True, db_index=True,
                           help_text="Discriminated key, e.g. 'voter_status:alice'.")

    # Holds ints, lists of party names, or encoded voter statuses.
    value = models.JSONField(null=True,
                             help_text="JSON-encoded value for this key.")

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['key']
        verbose_name_plural = "store entries"

    def __str__(self):
        return self.key
