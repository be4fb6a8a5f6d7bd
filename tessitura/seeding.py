"""Deterministic seed derivation.

Every node in the render tree owns a seed computed from its parent's seed and
its own path component, so any subtree can be regenerated in isolation and a
whole composition is reproducible from one root seed. Python's built-in
``hash()`` is salted per process for strings, so BLAKE2b is used instead.
"""

import hashlib
import random
import typing


SEED_BITS = 64


def derive_seed (parent_seed: int, *path: typing.Any) -> int:

	"""Return a 64-bit seed derived from a parent seed and path components.

	Example:
		```python
		derive_seed(42, "Section#0") == derive_seed(42, "Section#0")  # True
		derive_seed(42, "Section#0") == derive_seed(42, "Section#1")  # False
		```
	"""

	digest = hashlib.blake2b(digest_size=SEED_BITS // 8)
	digest.update(str(parent_seed).encode("utf-8"))

	for component in path:
		digest.update(b"\x1f")
		digest.update(str(component).encode("utf-8"))

	return int.from_bytes(digest.digest(), "big")


def make_rng (seed: int, *path: typing.Any) -> random.Random:

	"""
	Return a fresh ``random.Random`` seeded from ``seed`` (and an optional sub-path).
	"""

	if path:
		seed = derive_seed(seed, *path)

	return random.Random(seed)
