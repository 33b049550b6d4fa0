import pytest

from apps.users.models import User
from apps.users.permissions import is_admin_user


@pytest.mark.django_db
def test_create_admin_sets_role_and_staff():
    admin = User.objects.create_admin(email="Admin@Example.com", password="x" * 10)

    assert admin.role == User.RoleChoices.ADMIN
    assert admin.is_staff
    assert admin.is_admin()
    assert is_admin_user(admin)
    assert list(User.objects.admins()) == [admin]


@pytest.mark.django_db
def test_regular_user_is_not_admin():
    user = User.objects.create_user(email="user@example.com", phone="+62 812-3456", password="x" * 10)

    assert not is_admin_user(user)
    assert user.phone == "+628123456"
    assert user.display_name == "user@example.com"
