from dataclasses import dataclass, field
from typing import BinaryIO, List, Optional

import pandas as pd

from campus_portal.models.enums import UserRole
from campus_portal.utils.hashing import MIN_PASSWORD_LENGTH, MAX_PASSWORD_BYTES

REQUIRED_COLUMNS = ("name", "email", "password")

# header aliases seen in registrar exports
COLUMN_ALIASES = {
    "full name": "name",
    "student name": "name",
    "e-mail": "email",
    "email address": "email",
    "initial password": "password",
    "type": "role",
}


@dataclass
class RosterRow:
    line: int
    name: str
    email: str
    password: str
    role: UserRole


@dataclass
class ParsedRoster:
    rows: List[RosterRow] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


def to_str(v) -> Optional[str]:
    if v is None or pd.isna(v):
        return None
    s = str(v).strip()
    return None if s == "" or s.lower() == "nan" else s


def _normalize_header(h) -> str:
    key = str(h).strip().lower()
    return COLUMN_ALIASES.get(key, key)


def read_roster_frame(file: BinaryIO, filename: str) -> pd.DataFrame:
    if filename.lower().endswith(".csv"):
        df = pd.read_csv(file, dtype=str)
    else:
        df = pd.read_excel(file, dtype=str)
    df.columns = [_normalize_header(c) for c in df.columns]
    return df


def parse_roster(df: pd.DataFrame, default_role: UserRole = UserRole.STUDENT) -> ParsedRoster:
    """
    One user per row. Columns: name, email, password, role (optional).
    Bad rows are reported by spreadsheet line number and skipped.
    """
    out = ParsedRoster()

    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        out.errors.append(f"Missing column(s): {', '.join(missing)}")
        return out

    seen = set()
    for i, row in df.iterrows():
        # header is line 1
        line = int(i) + 2
        name = to_str(row.get("name"))
        email = to_str(row.get("email"))
        password = to_str(row.get("password"))
        role_raw = to_str(row.get("role")) if "role" in df.columns else None

        if not name or not email or not password:
            out.errors.append(f"line {line}: name, email and password are required")
            continue

        email = email.lower()
        if "@" not in email:
            out.errors.append(f"line {line}: invalid email {email}")
            continue
        if email in seen:
            out.errors.append(f"line {line}: duplicate email {email}")
            continue
        if len(password) < MIN_PASSWORD_LENGTH:
            out.errors.append(f"line {line}: password must be at least {MIN_PASSWORD_LENGTH} characters")
            continue
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            out.errors.append(f"line {line}: password longer than {MAX_PASSWORD_BYTES} bytes")
            continue

        role = default_role
        if role_raw:
            try:
                role = UserRole(role_raw.upper())
            except ValueError:
                out.errors.append(f"line {line}: unknown role {role_raw}")
                continue

        seen.add(email)
        out.rows.append(RosterRow(line=line, name=name, email=email, password=password, role=role))

    return out
