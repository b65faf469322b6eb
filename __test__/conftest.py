import pytest

from esp32_reset import LineControl, LineControlError, LineState


class FakeLineControl(LineControl):
    """記憶體中的控制線，記錄每一次寫入"""

    def __init__(self, port="/dev/fake0", fail_on_write=None):
        self.port = port
        self.state = LineState(dtr=True, rts=True)  # kernel 開啟 tty 時會拉高兩條線
        self.writes = []
        self.reads = 0
        self.closed = False
        self.fail_on_write = fail_on_write

    @property
    def is_open(self):
        return not self.closed

    def get_lines(self):
        self.reads += 1
        return self.state

    def set_lines(self, dtr, rts):
        if self.fail_on_write is not None and len(self.writes) == self.fail_on_write:
            raise LineControlError("set", self.port, OSError(5, "Input/output error"))
        self.state = LineState(dtr, rts)
        self.writes.append(self.state)

    def close(self):
        self.closed = True


class SleepRecorder:
    def __init__(self):
        self.delays = []

    def __call__(self, seconds):
        self.delays.append(seconds)


@pytest.fixture
def fake_control():
    return FakeLineControl()


@pytest.fixture
def make_control():
    return FakeLineControl


@pytest.fixture
def sleeps():
    return SleepRecorder()
