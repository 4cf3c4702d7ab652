"""
The `crypt` package provides cryptographic utilities that secure
authentication workflows and user data.

It centralizes password hashing, password validation, and the generation of
the one-time tokens embedded in verification and password-reset links.

Contents
--------
- encrypt_decrypt
    Utility module exposing the `EncryptionDec` class:
        * `hash_password` — securely hashes plaintext passwords using bcrypt
        * `check_passwords` — verifies a plaintext password against a hashed one
        * `is_valid_password` — validates password complexity rules:
            - 8 characters to 72 bytes (bcrypt's input limit)
            - must include lowercase, uppercase, digit, and special character
        * `generate_link_token` — produces URL-safe random tokens for e-mail links
"""
