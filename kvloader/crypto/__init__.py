"""
Cryptographic module for kvloader.

Identity resolution and decryption dispatch for age-encrypted sources. The
primitives themselves come from pyrage; this package only decides which
identities apply and how a blob is decrypted.
"""

from .decrypt import (
    DecryptMode,
    decide_mode,
    decrypt,
    decrypt_inline_yaml,
    decrypt_value,
    is_armored,
)

from .identities import (
    parse_identity_file,
    probe_ssh_identity,
    resolve_identities,
    ssh_key_paths,
)

__all__ = [
    # Decryption
    'DecryptMode',
    'decide_mode',
    'decrypt',
    'decrypt_inline_yaml',
    'decrypt_value',
    'is_armored',

    # Identities
    'parse_identity_file',
    'probe_ssh_identity',
    'resolve_identities',
    'ssh_key_paths',
]
