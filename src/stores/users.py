"""
In-memory user list for the admin demo.

Seeded with fixed mock users on every start and never persisted.
"""
from __future__ import annotations

import re
import time
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from math import ceil
from typing import Dict, Iterable, List, Optional

from db.models import USER_ROLES, USER_STATUSES, Order, User
from utils.config import Config
from utils.exceptions import ValidationError
from utils.pure import round_money

ROLE_FILTER_ALL = "All"

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

_SEED_USERS = [
    ("1", "John Doe", "john.doe@example.com", "Admin", "Active", "2024-01-15"),
    ("2", "Jane Smith", "jane.smith@example.com", "Editor", "Active", "2024-01-20"),
    ("3", "Mike Johnson", "mike.johnson@example.com", "Viewer", "Inactive", "2024-01-25"),
    ("4", "Sarah Wilson", "sarah.wilson@example.com", "Editor", "Active", "2024-02-01"),
    ("5", "David Brown", "david.brown@example.com", "Viewer", "Inactive", "2024-02-05"),
    ("6", "Lisa Davis", "lisa.davis@example.com", "Admin", "Active", "2024-02-10"),
    ("7", "Tom Anderson", "tom.anderson@example.com", "Viewer", "Inactive", "2024-02-15"),
    ("8", "Emily Taylor", "emily.taylor@example.com", "Editor", "Active", "2024-02-20"),
]


def seed_users() -> List[User]:
    return [
        User(uid, name, email, role, status, date.fromisoformat(created))
        for uid, name, email, role, status, created in _SEED_USERS
    ]


def validate_user_fields(
    name: str, email: str, role: str, status: str
) -> Dict[str, str]:
    """Return per-field error messages; empty when everything is valid."""
    errors: Dict[str, str] = {}
    if len((name or "").strip()) < 2:
        errors["name"] = "Name must be at least 2 characters"
    if not _EMAIL_RE.match((email or "").strip()):
        errors["email"] = "Please enter a valid email address"
    if role not in USER_ROLES:
        errors["role"] = f"Role must be one of {', '.join(USER_ROLES)}"
    if status not in USER_STATUSES:
        errors["status"] = f"Status must be one of {', '.join(USER_STATUSES)}"
    return errors


def filter_users(
    users: Iterable[User], search_term: str = "", role_filter: str = ROLE_FILTER_ALL
) -> List[User]:
    """Case-insensitive substring match on name or email, plus exact role."""
    term = (search_term or "").lower()
    return [
        u
        for u in users
        if (term in u.name.lower() or term in u.email.lower())
        and (role_filter == ROLE_FILTER_ALL or u.role == role_filter)
    ]


@dataclass(frozen=True)
class UserPage:
    users: List[User]
    page: int
    page_count: int
    total: int
    page_size: int = Config.USERS_PER_PAGE

    @property
    def first_index(self) -> int:
        """1-based index of the first user shown, 0 when the page is empty."""
        if not self.users:
            return 0
        return (self.page - 1) * self.page_size + 1

    @property
    def last_index(self) -> int:
        return self.first_index + len(self.users) - 1 if self.users else 0


@dataclass(frozen=True)
class AdminStats:
    total_users: int
    active_users: int
    inactive_users: int
    total_orders: int
    total_revenue: Decimal


class UserStore:
    def __init__(
        self,
        users: Optional[Iterable[User]] = None,
        page_size: int = Config.USERS_PER_PAGE,
    ):
        self._users: List[User] = list(users) if users is not None else seed_users()
        self.page_size = page_size
        self.search_term = ""
        self.role_filter = ROLE_FILTER_ALL
        self.page = 1

    @property
    def users(self) -> List[User]:
        return list(self._users)

    def get(self, user_id: str) -> Optional[User]:
        for u in self._users:
            if u.id == user_id:
                return u
        return None

    # ---------------------------
    # CRUD
    # ---------------------------

    def add_user(
        self,
        name: str,
        email: str,
        role: str,
        status: str,
        today: Optional[date] = None,
    ) -> User:
        errors = validate_user_fields(name, email, role, status)
        if errors:
            raise ValidationError(errors)

        user = User(
            id=self._new_id(),
            name=name.strip(),
            email=email.strip(),
            role=role,
            status=status,
            created_at=today or date.today(),
        )
        self._users.insert(0, user)
        return user

    def update_user(self, user: User) -> bool:
        """Replace the user with the same id. False if no such user."""
        errors = validate_user_fields(user.name, user.email, user.role, user.status)
        if errors:
            raise ValidationError(errors)
        for i, existing in enumerate(self._users):
            if existing.id == user.id:
                self._users[i] = user
                return True
        return False

    def delete_user(self, user_id: str) -> bool:
        before = len(self._users)
        self._users = [u for u in self._users if u.id != user_id]
        self.page = min(self.page, self.page_count())
        return len(self._users) < before

    def toggle_status(self, user_id: str) -> Optional[User]:
        for i, u in enumerate(self._users):
            if u.id == user_id:
                new_status = "Inactive" if u.status == "Active" else "Active"
                self._users[i] = replace(u, status=new_status)
                return self._users[i]
        return None

    # ---------------------------
    # Filtering & paging
    # ---------------------------

    def set_search_term(self, term: str) -> None:
        self.search_term = term or ""
        self.page = 1

    def set_role_filter(self, role_filter: str) -> None:
        self.role_filter = role_filter or ROLE_FILTER_ALL
        self.page = 1

    def filtered(self) -> List[User]:
        return filter_users(self._users, self.search_term, self.role_filter)

    def page_count(self) -> int:
        return max(ceil(len(self.filtered()) / self.page_size), 1)

    def set_page(self, page: int) -> int:
        self.page = max(1, min(int(page), self.page_count()))
        return self.page

    def current_page(self) -> UserPage:
        filtered = self.filtered()
        page_count = max(ceil(len(filtered) / self.page_size), 1)
        page = max(1, min(self.page, page_count))
        start = (page - 1) * self.page_size
        return UserPage(
            users=filtered[start : start + self.page_size],
            page=page,
            page_count=page_count,
            total=len(filtered),
            page_size=self.page_size,
        )

    def stats(self, orders: Iterable[Order] = ()) -> AdminStats:
        orders = list(orders)
        active = sum(1 for u in self._users if u.status == "Active")
        return AdminStats(
            total_users=len(self._users),
            active_users=active,
            inactive_users=len(self._users) - active,
            total_orders=len(orders),
            total_revenue=round_money(sum((o.total for o in orders), Decimal("0"))),
        )

    def _new_id(self) -> str:
        candidate = int(time.time() * 1000)
        taken = {u.id for u in self._users}
        while str(candidate) in taken:
            candidate += 1
        return str(candidate)
