"""
The `crypt` package holds the password utilities used by login and user
creation.

Contents
--------
- passwords
    `PasswordHasher`:
        * `hash_password` — hashes plaintext passwords with bcrypt
        * `check_passwords` — verifies a plaintext password against a hash
"""
