import pytest
from fakes import FakeBucket, FakeFirestore
from harness import TriggerHarness


@pytest.fixture
def db() -> FakeFirestore:
    return FakeFirestore()


@pytest.fixture
def bucket() -> FakeBucket:
    return FakeBucket()


@pytest.fixture
def harness(db: FakeFirestore, bucket: FakeBucket) -> TriggerHarness:
    return TriggerHarness(db, bucket)

