from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """System user with a role used for access checks and notification routing."""

    class Role(models.TextChoices):
        ADMIN = 'admin', 'Administrator'
        INVENTORY_MANAGER = 'inventory_manager', 'Inventory manager'
        IT_MANAGER = 'it_manager', 'IT manager'
        EMPLOYEE = 'employee', 'Employee'

    role = models.CharField(
        'Role',
        max_length=20,
        choices=Role.choices,
        default=Role.EMPLOYEE,
    )
    department = models.CharField('Department', max_length=255, blank=True)
    phone = models.CharField('Phone', max_length=20, blank=True)

    class Meta:
        verbose_name = 'User'
        verbose_name_plural = 'Users'
        ordering = ['last_name', 'first_name']

    def __str__(self):
        return self.get_full_name() or self.username

    def save(self, *args, **kwargs):
        if self.is_superuser:
            self.role = self.Role.ADMIN
        super().save(*args, **kwargs)

    @property
    def is_admin(self):
        return self.role == self.Role.ADMIN or self.is_superuser

    @property
    def is_inventory_manager(self):
        return self.role == self.Role.INVENTORY_MANAGER

    @property
    def is_it_manager(self):
        return self.role == self.Role.IT_MANAGER
