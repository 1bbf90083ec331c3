"""
Property-based tests for share link access control.
"""

import threading
from datetime import datetime, timedelta

from hypothesis import given, settings
from hypothesis import strategies as st

from filevault.domain.errors import (
    PasswordIncorrectError,
    QuotaExceededError,
    ShareExpiredError,
    ShareNotFoundError,
)
from filevault.domain.sharing import UNSET, AccessOutcome, AccessPolicyEvaluator, ShareDefaults
from tests.fixtures import create_share_link
from tests.property.strategies import (
    HASHER,
    PASSWORD,
    build_share_manager,
    link_states,
    quotas,
    share_patches,
    supplied_passwords,
)

NOW = datetime(2024, 6, 1, 12, 0, 0)


class TestQuotaProperties:
    @given(quota=quotas, attempts=st.integers(min_value=0, max_value=25))
    def test_successful_downloads_never_exceed_quota(self, quota, attempts):
        manager, file = build_share_manager()
        link, _ = manager.get_or_create(file.id, "user-1", ShareDefaults(max_downloads=quota))

        granted = 0
        for _ in range(attempts):
            try:
                manager.record_download(link.share_token)
                granted += 1
            except QuotaExceededError:
                pass

        assert granted == min(attempts, quota)
        assert manager.share_repo.get(link.id).download_count == granted

    @settings(max_examples=20)
    @given(quota=quotas, workers=st.integers(min_value=2, max_value=16))
    def test_concurrent_downloads_never_exceed_quota(self, quota, workers):
        manager, file = build_share_manager()
        link, _ = manager.get_or_create(file.id, "user-1", ShareDefaults(max_downloads=quota))
        granted = []
        barrier = threading.Barrier(workers)

        def download():
            barrier.wait()
            try:
                granted.append(manager.record_download(link.share_token).link.download_count)
            except QuotaExceededError:
                pass

        threads = [threading.Thread(target=download) for _ in range(workers)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(granted) == list(range(1, min(quota, workers) + 1))


class TestGateOrderProperties:
    @given(state=link_states(), supplied=supplied_passwords)
    def test_first_failing_gate_decides(self, state, supplied):
        expired = state.pop("expired")
        link = create_share_link(
            expires_at=NOW - timedelta(minutes=1) if expired else NOW + timedelta(days=1),
            **state,
        )
        evaluator = AccessPolicyEvaluator(HASHER)

        if not link.is_active:
            expected = ShareNotFoundError
        elif expired:
            expected = ShareExpiredError
        elif link.max_downloads is not None and link.download_count >= link.max_downloads:
            expected = QuotaExceededError
        elif link.password_hash and supplied not in (None, "") and supplied != PASSWORD:
            expected = PasswordIncorrectError
        else:
            expected = None

        try:
            decision = evaluator.evaluate(link, supplied, now=NOW)
        except (ShareNotFoundError, ShareExpiredError, QuotaExceededError, PasswordIncorrectError) as e:
            assert type(e) is expected
            return

        assert expected is None
        if link.password_hash and supplied in (None, ""):
            assert decision.outcome == AccessOutcome.PASSWORD_REQUIRED
            assert not decision.can_view and not decision.can_download
        else:
            assert decision.is_granted
            assert (decision.can_view, decision.can_download) == (link.can_view, link.can_download)


class TestShareLifecycleProperties:
    @given(defaults=st.lists(
        st.builds(ShareDefaults, can_view=st.booleans(), can_download=st.booleans()),
        min_size=1,
        max_size=5,
    ))
    def test_get_or_create_is_idempotent(self, defaults):
        manager, file = build_share_manager()

        results = [manager.get_or_create(file.id, "user-1", d) for d in defaults]

        assert [created for _, created in results] == [True] + [False] * (len(defaults) - 1)
        assert len({link.share_token for link, _ in results}) == 1
        first = results[0][0]
        assert all(
            (link.can_view, link.can_download) == (first.can_view, first.can_download)
            for link, _ in results
        )

    @settings(max_examples=20)
    @given(workers=st.integers(min_value=2, max_value=16))
    def test_concurrent_get_or_create_yields_one_active_link(self, workers):
        manager, file = build_share_manager()
        results = []
        barrier = threading.Barrier(workers)

        def request_link():
            barrier.wait()
            results.append(manager.get_or_create(file.id, "user-1"))

        threads = [threading.Thread(target=request_link) for _ in range(workers)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert [created for _, created in results].count(True) == 1
        assert len({link.share_token for link, _ in results}) == 1
        assert len(manager.list_for_owner("user-1")) == 1

    @given(patch=share_patches())
    def test_patch_leaves_unsupplied_fields_alone(self, patch):
        manager, file = build_share_manager()
        link, _ = manager.get_or_create(
            file.id, "user-1",
            ShareDefaults(can_view=False, can_download=True, expires_in_days=3, max_downloads=7),
        )

        updated = manager.update(link.id, "user-1", patch, now=NOW)

        assert updated.share_token == link.share_token
        assert updated.download_count == link.download_count
        if patch.can_view is UNSET:
            assert updated.can_view == link.can_view
        if patch.can_download is UNSET:
            assert updated.can_download == link.can_download
        if patch.expires_in_days is UNSET:
            assert updated.expires_at == link.expires_at
        elif not patch.expires_in_days:
            assert updated.expires_at is None
        if patch.max_downloads is UNSET:
            assert updated.max_downloads == link.max_downloads
        else:
            assert updated.max_downloads == patch.max_downloads
