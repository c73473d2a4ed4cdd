"""
TransitionScheduler 단위 테스트

이 모듈은 프레임 클록 위의 형상 전환 수명 주기를 테스트합니다.
"""

import pytest
from unittest.mock import Mock

from conftest import FakeFrameClock
from incident_map.core.models import PointGeometry, PolygonGeometry
from incident_map.rendering.transitions import TransitionScheduler


SMALL = PolygonGeometry(coordinates=[[[0, 0], [1, 0], [1, 1], [0, 1], [0, 0]]])
LARGE = PolygonGeometry(coordinates=[[[0, 0], [2, 0], [2, 2], [0, 2], [0, 0]]])


@pytest.fixture
def scheduler(clock):
    """테스트용 스케줄러 (선형 이징)"""
    return TransitionScheduler(clock, easing=lambda p: p)


class TestTransitionLifecycle:
    """전환 수명 주기 테스트"""

    def test_start_requests_frame(self, scheduler, clock):
        """시작 시 프레임 요청 테스트"""
        scheduler.start("a", SMALL, LARGE, 500, Mock())

        assert scheduler.is_active("a")
        assert scheduler.active_count == 1
        assert clock.pending_count == 1

    def test_frames_until_complete(self, scheduler, clock):
        """완료까지 프레임 진행 테스트"""
        frames = []
        on_complete = Mock()
        scheduler.start("a", SMALL, LARGE, 500, frames.append, on_complete)

        clock.tick(250)
        assert frames[-1].coordinates[0][1] == [1.5, 0.0]
        assert scheduler.get("a").progress == pytest.approx(0.5)
        on_complete.assert_not_called()

        clock.tick(500)
        assert frames[-1].coordinates == LARGE.coordinates
        on_complete.assert_called_once()
        assert not scheduler.is_active("a")
        assert clock.pending_count == 0

    def test_eased_progress(self, clock):
        """이징 적용 테스트"""
        scheduler = TransitionScheduler(clock)
        frames = []
        scheduler.start("a", SMALL, LARGE, 500, frames.append)

        clock.tick(250)
        # ease_out_cubic(0.5) = 0.875
        assert frames[-1].coordinates[0][1][0] == pytest.approx(1.875)

    def test_zero_duration_completes_on_first_frame(self, scheduler, clock):
        """0 시간 전환 테스트"""
        on_complete = Mock()
        scheduler.start("a", SMALL, LARGE, 0, Mock(), on_complete)

        clock.tick(1)
        on_complete.assert_called_once()

    def test_start_uses_clock_now(self, scheduler, clock):
        """시작 시각 기록 테스트"""
        clock.time_ms = 1000
        transition = scheduler.start("a", SMALL, LARGE, 500, Mock())
        assert transition.started_at == 1000


class TestSingleWriter:
    """엔티티별 단일 전환 테스트"""

    def test_restart_cancels_previous_chain(self, scheduler, clock):
        """재시작 시 이전 체인 취소 테스트"""
        first_frames = Mock()
        first_complete = Mock()
        second_frames = Mock()

        scheduler.start("a", SMALL, LARGE, 500, first_frames, first_complete)
        clock.tick(100)
        assert first_frames.call_count == 1

        scheduler.start("a", LARGE, SMALL, 500, second_frames)
        clock.run_until_idle()

        # 이전 체인은 더 이상 쓰지 않음
        assert first_frames.call_count == 1
        first_complete.assert_not_called()
        assert second_frames.call_count > 0
        assert scheduler.active_count == 0

    def test_only_one_pending_frame_per_entity(self, scheduler, clock):
        """엔티티별 대기 프레임 하나 테스트"""
        scheduler.start("a", SMALL, LARGE, 500, Mock())
        scheduler.start("a", SMALL, LARGE, 500, Mock())
        scheduler.start("a", SMALL, LARGE, 500, Mock())

        assert clock.pending_count == 1
        assert len(clock.cancelled) == 2

    def test_independent_entities(self, scheduler, clock):
        """엔티티 간 독립성 테스트"""
        scheduler.start("a", SMALL, LARGE, 500, Mock())
        scheduler.start("b", SMALL, LARGE, 500, Mock())

        scheduler.cancel("a")

        assert not scheduler.is_active("a")
        assert scheduler.is_active("b")

    def test_stale_callback_is_noop(self, clock):
        """취소 후 늦게 실행된 콜백 무시 테스트"""
        # cancel_frame이 콜백을 지우지 못하는 호스트를 흉내냄
        leaky = FakeFrameClock()
        leaky.cancel_frame = lambda handle: None
        scheduler = TransitionScheduler(leaky)
        on_frame = Mock()
        on_complete = Mock()

        scheduler.start("a", SMALL, LARGE, 500, on_frame, on_complete)
        scheduler.cancel("a")
        leaky.tick(600)

        on_frame.assert_not_called()
        on_complete.assert_not_called()


class TestCancel:
    """취소 테스트"""

    def test_cancel_never_completes(self, scheduler, clock):
        """취소 시 on_complete 미호출 테스트"""
        on_complete = Mock()
        scheduler.start("a", SMALL, LARGE, 500, Mock(), on_complete)
        clock.tick(100)

        assert scheduler.cancel("a") is True
        clock.run_until_idle()

        on_complete.assert_not_called()

    def test_cancel_unknown(self, scheduler):
        """없는 전환 취소 테스트"""
        assert scheduler.cancel("missing") is False

    def test_cancel_inside_frame(self, scheduler, clock):
        """프레임 콜백 안에서 취소 테스트"""
        on_complete = Mock()

        def on_frame(_geometry):
            scheduler.cancel("a")

        scheduler.start("a", SMALL, LARGE, 500, on_frame, on_complete)
        clock.tick(100)

        assert clock.pending_count == 0
        on_complete.assert_not_called()

    def test_failing_frame_ends_chain(self, scheduler, clock):
        """프레임 콜백 예외 시 체인 종료 테스트"""
        on_complete = Mock()
        on_frame = Mock(side_effect=RuntimeError("surface busy"))
        scheduler.start("a", SMALL, LARGE, 500, on_frame, on_complete)
        scheduler.start("b", SMALL, LARGE, 500, Mock())

        clock.tick(100)

        assert not scheduler.is_active("a")
        assert scheduler.active_ids == ["b"]
        assert scheduler.cancel("a") is False
        clock.run_until_idle()
        on_frame.assert_called_once()
        on_complete.assert_not_called()

    def test_cancel_all(self, scheduler, clock):
        """전체 취소 테스트"""
        scheduler.start("a", SMALL, LARGE, 500, Mock())
        scheduler.start("b", PointGeometry(coordinates=[0, 0]), SMALL, 500, Mock())

        assert scheduler.cancel_all() == 2
        assert scheduler.active_ids == []
        assert clock.pending_count == 0
