import sys
import os

# Add current directory to path
sys.path.append(os.getcwd())

from app.core.exceptions import Conflict
from app.db.session import get_store
from app.models.user import UserRole
from app.schemas.user import UserCreate
from app.services.categories import CategoryService
from app.services.users import UserService


def create_initial_user():
    print("--- Initial User Creation ---")

    username = os.getenv("ADMIN_USERNAME", "admin")
    email = os.getenv("ADMIN_EMAIL", "admin@example.com")
    password = os.getenv("ADMIN_PASSWORD", "adminpassword")
    full_name = "Administrator"

    store = get_store()

    seeded = CategoryService(store).seed_defaults()
    if seeded:
        print(f"Seeded {len(seeded)} default categories.")

    print(f"Creating user {username}...")
    try:
        UserService(store).create(UserCreate(
            username=username,
            email=email,
            password=password,
            full_name=full_name,
            role=UserRole.ADMIN,
        ))
    except Conflict as exc:
        print(exc.message)
        return

    print("Initial user created successfully!")
    print(f"Username: {username}")
    print(f"Email: {email}")
    print(f"Password: {password}")
    print(f"Role: {UserRole.ADMIN.value}")

if __name__ == "__main__":
    create_initial_user()
