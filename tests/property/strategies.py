"""
Hypothesis Strategies for Property-Based Testing

Custom strategies for generating artifact records, short ids and
passwords. Password hashes use a low iteration count to keep runs fast.
"""

import uuid
from datetime import datetime, timedelta, timezone

from hypothesis import strategies as st

from linkdrop.domain.artifacts import ArtifactRecord, hash_password
from linkdrop.domain.link_registry.entities import SHORT_ID_ALPHABET

FAST_HASH_ITERATIONS = 1000

BASE_TIME = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


# =============================================================================
# Primitive Strategies
# =============================================================================

passwords = st.text(min_size=1, max_size=40)

short_ids = st.text(alphabet=SHORT_ID_ALPHABET, min_size=7, max_size=64)

download_limits = st.one_of(st.none(), st.integers(min_value=0, max_value=50))

lifetimes = st.one_of(
    st.none(),
    st.timedeltas(min_value=timedelta(seconds=1), max_value=timedelta(days=365)),
)

offsets = st.timedeltas(min_value=timedelta(0), max_value=timedelta(days=400))


# =============================================================================
# Domain Object Strategies
# =============================================================================

@st.composite
def artifact_records(draw, password=None) -> ArtifactRecord:
    """Generate artifact records with arbitrary expiry, quota and counter."""
    limit = draw(download_limits)
    if limit is None:
        count = draw(st.integers(min_value=0, max_value=100))
    else:
        count = draw(st.integers(min_value=0, max_value=limit))
    lifetime = draw(lifetimes)
    password_hash = None
    if password is not None:
        password_hash = hash_password(password, iterations=FAST_HASH_ITERATIONS)

    return ArtifactRecord(
        id=uuid.uuid4().hex,
        storage_key="uploads/prop/file.bin",
        original_name=draw(st.text(min_size=1, max_size=30)),
        size=draw(st.integers(min_value=0, max_value=2 ** 40)),
        owner_id="guest:property-test",
        created_at=BASE_TIME,
        password_hash=password_hash,
        expires_at=BASE_TIME + lifetime if lifetime is not None else None,
        download_limit=limit,
        download_count=count,
    )
