#!/usr/bin/env python3
"""
Generate the RSA key pair used to encrypt stored passwords.

Usage:
  python scripts/generate_keys.py [--bits 4096] [--force]

Keys are written to PUBLIC_KEY_PATH / PRIVATE_KEY_PATH (defaults: rsa_key.pub, rsa_key).
"""
from __future__ import annotations

import argparse
from pathlib import Path

from memberhub.core.config import get_settings
from memberhub.core.security import DEFAULT_KEY_SIZE, generate_key_material, write_key_pair


def main() -> None:
    ap = argparse.ArgumentParser(description="Generate the password encryption key pair")
    ap.add_argument("--bits", type=int, default=DEFAULT_KEY_SIZE, help="RSA modulus size")
    ap.add_argument("--force", action="store_true", help="Overwrite existing key files")
    args = ap.parse_args()

    settings = get_settings()
    public_path = Path(settings.public_key_path)
    private_path = Path(settings.private_key_path)
    if not args.force and (public_path.exists() or private_path.exists()):
        raise SystemExit("Key files already exist; every stored password depends on them. Use --force to replace.")

    write_key_pair(generate_key_material(args.bits), str(public_path), str(private_path))
    print("OK: key pair written")
    print(f"  public:  {public_path}")
    print(f"  private: {private_path}")


if __name__ == "__main__":
    main()
