from django.db import models


class SystemSetting(models.Model):
    """Persistent key/value setting read and written by the sidecar supervisor"""

    key = models.CharField(max_length=200, primary_key=True)
    value = models.JSONField(null=True, blank=True)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["key"]

    def __str__(self):
        return f"{self.key} = {self.value!r}"
