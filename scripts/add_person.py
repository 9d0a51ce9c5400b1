#!/usr/bin/env python3
"""
Register a member directly in the database.

Usage:
  python scripts/add_person.py --email ana@example.com --name "Ana" --password secret [--admin] [--verified]
"""
from __future__ import annotations

import argparse

from memberhub.core.config import get_settings
from memberhub.core.security import RSACredentialCipher, load_key_material
from memberhub.db import create_all
from memberhub.services.credential_service import CredentialStore
from memberhub.services.person_service import PersonService, RegistrationError


def main() -> None:
    ap = argparse.ArgumentParser(description="Register a member")
    ap.add_argument("--email", required=True)
    ap.add_argument("--name", required=True)
    ap.add_argument("--password", required=True)
    ap.add_argument("--admin", action="store_true", help="Grant admin rights")
    ap.add_argument("--verified", action="store_true", help="Mark the email as verified")
    args = ap.parse_args()

    settings = get_settings()
    create_all()
    credentials = CredentialStore(cipher=RSACredentialCipher(load_key_material(settings)), settings=settings)
    people = PersonService(credentials=credentials)
    try:
        person = people.register(args.email, args.name, args.password, args.password, admin=args.admin)
    except RegistrationError as exc:
        raise SystemExit("; ".join(exc.errors))
    if args.verified:
        people.verify_email(person)
    print("OK: person registered")
    print(f"  id:    {person.id}")
    print(f"  email: {person.email}")
    print(f"  admin: {'yes' if person.admin else 'no'}")


if __name__ == "__main__":
    main()
