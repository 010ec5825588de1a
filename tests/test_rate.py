"""
Rate Meter Tests
================
"""

from freed_bridge.observability.rate import RateMeter


class FakeClock:
    def __init__(self, now: float = 100.0) -> None:
        self.now = now
    
    def __call__(self) -> float:
        return self.now


class TestRateMeter:
    """Tests for per-second frame counting."""
    
    def test_reports_count_at_second_boundary(self):
        clock = FakeClock(100.0)
        meter = RateMeter(clock=clock)
        
        results = []
        for i in range(60):
            clock.now = 100.0 + i / 100.0
            results.append(meter.tick())
        
        assert results == [None] * 60
        
        clock.now = 101.02
        assert meter.tick() == 60
        assert meter.last_rate == 60
        assert meter.count == 1
    
    def test_consecutive_seconds(self):
        clock = FakeClock(10.1)
        meter = RateMeter(clock=clock, log_rate=False)
        for _ in range(3):
            meter.tick()
        clock.now = 11.5
        assert meter.tick() == 3
        meter.tick()
        clock.now = 12.0
        assert meter.tick() == 2
    
    def test_logs_fps(self, caplog):
        clock = FakeClock(5.0)
        meter = RateMeter(clock=clock)
        meter.tick()
        clock.now = 6.0
        with caplog.at_level("INFO", logger="freed_bridge.observability.rate"):
            meter.tick()
        assert "FPS: 1" in caplog.text
