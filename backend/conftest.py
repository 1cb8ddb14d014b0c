import itertools

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from apps.accounts.models import User
from apps.assets.models import Asset

_asset_numbers = itertools.count(1)


@pytest.fixture
def today():
    return timezone.localdate()


@pytest.fixture
def make_user(db):
    def factory(username, role=User.Role.EMPLOYEE, **kwargs):
        return User.objects.create_user(username=username, password='secret-pass-123', role=role, **kwargs)
    return factory


@pytest.fixture
def admin_user(make_user):
    return make_user('admin', role=User.Role.ADMIN)


@pytest.fixture
def staff(make_user, admin_user):
    """One active user per role plus an inactive administrator."""
    return {
        'admin': admin_user,
        'inventory_manager': make_user('stock', role=User.Role.INVENTORY_MANAGER),
        'it_manager': make_user('it', role=User.Role.IT_MANAGER),
        'employee': make_user('employee'),
        'inactive_admin': make_user('former', role=User.Role.ADMIN, is_active=False),
    }


@pytest.fixture
def make_asset(db):
    def factory(**kwargs):
        number = next(_asset_numbers)
        kwargs.setdefault('asset_id', f'AST-{number:05d}')
        kwargs.setdefault('manufacturer', 'Dell')
        kwargs.setdefault('model', f'Latitude {number}')
        kwargs.setdefault('category', 'Laptop')
        kwargs.setdefault('status', Asset.Status.ACTIVE)
        kwargs.setdefault('condition', Asset.Condition.GOOD)
        return Asset.objects.create(**kwargs)
    return factory


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def admin_client(api_client, admin_user):
    api_client.force_authenticate(admin_user)
    return api_client
