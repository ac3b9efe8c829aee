from django.db import models
from django.utils import timezone


def default_preferences():
    return {
        'theme': 'dark',
        'background_type': 'none',
        'background_image': None,
        'default_background': None,
    }


class User(models.Model):
    user_id = models.CharField(max_length=64, unique=True, primary_key=True)
    name = models.CharField(max_length=100)
    email = models.EmailField(max_length=255, unique=True)
    is_online = models.BooleanField(default=False)
    last_seen = models.DateTimeField(default=timezone.now)
    preferences = models.JSONField(default=default_preferences, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'users'
        ordering = ['name']
        indexes = [
            models.Index(fields=['name'], name='users_name_idx'),
        ]

    def __str__(self):
        return f'{self.name} ({self.user_id})'

    def save(self, *args, **kwargs):
        if self.email:
            self.email = self.email.strip().lower()
        super().save(*args, **kwargs)

    # Lets DRF's IsAuthenticated accept a resolved chat user as request.user.
    @property
    def is_authenticated(self):
        return True
