# coding: utf-8
import pytest

from domain.byte_channel import ByteChannel, SerialByteChannel
from domain.errors import CommandArgumentError
import domain.sam9.monitor_comm as monitor_comm
from domain.sam9.mock_monitor_comm import MockSam9Monitor

class ScriptedChannel(ByteChannel):
    """@brief Byte channel replaying a fixed sequence of incoming bytes and recording written bytes
    """
    def __init__(self, incoming: bytes = b''):
        self.incoming = bytearray(incoming)
        self.written = bytearray()
        self.polls = 0

    def poll_ready(self, timeout=None) -> bool:
        self.polls += 1
        return len(self.incoming) > 0

    def read_byte(self):
        if len(self.incoming) == 0:
            return None
        byte = self.incoming[0]
        del self.incoming[0]
        return byte

    def write(self, data: bytes) -> None:
        self.written += data

class EchoRecorder:
    def __init__(self):
        self.data = bytearray()

    def write(self, data: bytes) -> None:
        self.data += data

@pytest.mark.parametrize("buffer, expected", [
    (b"\n\r0x12345678\n\r>", 0x12345678),
    (b"0xdeadBEEF", 0xdeadbeef),
    (b"0x1f", 0x1f),
    (b"value: 0x2A and 0x33", 0x2a),     # Only the first token is honored
    (b"0x0x12", 0x12),                   # Like %X, the value parser tolerates a 0x prefix
    (b"0x 7f", 0x7f),                    # Like %X, the value parser skips leading whitespace
    (b"0x123456789", 0x23456789),        # Values are truncated to 32 bits
])
def test_scan_hex_value_extracts_first_token(buffer, expected):
    assert monitor_comm.scan_hex_value(buffer) == expected

@pytest.mark.parametrize("buffer", [
    b"",
    b"RomBOOT\n\r>",
    b"0",
    b"0x",          # Partial token with no digits
    b"0xzz",
    b"x12",
    b"00x12",       # The second '0' is consumed by the state 1 mismatch and is not re-examined
])
def test_scan_hex_value_without_valid_token(buffer):
    assert monitor_comm.scan_hex_value(buffer) == 0

def test_scan_hex_value_restarts_after_mismatch():
    # The mismatching character is skipped, but a later complete token is still found
    assert monitor_comm.scan_hex_value(b"0y 0x55") == 0x55
    assert monitor_comm.scan_hex_value(b"0a0x10") == 0x10

def test_read_response_value_and_bytes_read_are_independent():
    response = monitor_comm.read_response(ScriptedChannel(b"\n\r>"))
    assert response.value == 0
    assert response.bytes_read == 3
    assert response.raw == b"\n\r>"

def test_read_response_silent_target():
    channel = ScriptedChannel()
    response = monitor_comm.read_response(channel)
    assert response.bytes_read == 0
    assert response.value == 0
    assert channel.polls == 1

def test_read_response_is_bounded():
    channel = ScriptedChannel(b"A" * 40 + b"0x11")
    response = monitor_comm.read_response(channel)
    assert response.bytes_read == monitor_comm.RESPONSE_BUFFER_SIZE
    assert response.value == 0
    # The rest stays in the channel for the next cycle
    assert monitor_comm.read_response(channel).value == 0x11

def test_read_response_echo():
    echo = EchoRecorder()
    monitor_comm.read_response(ScriptedChannel(b"\n\r0x000000FF\n\r>"), echo_output=echo)
    assert echo.data == b"\n\r0x000000FF\n\r>"

def test_read_response_no_echo_when_silent():
    echo = EchoRecorder()
    monitor_comm.read_response(ScriptedChannel(), echo_output=echo)
    assert echo.data == b""

def test_command_texts():
    assert monitor_comm.CommandReadWord(0x300000).get_as_buffer() == b"w300000,4#\n"
    assert monitor_comm.CommandReadByte(0x300004).get_as_buffer() == b"o300004,1#\n"
    assert monitor_comm.CommandWriteWord(0x300000, 0xe59ff018).get_as_buffer() == b"W300000,E59FF018#\n"
    assert monitor_comm.CommandWriteByte(0x300005, 0x7).get_as_buffer() == b"O300005,07#\n"
    assert monitor_comm.CommandGo(0x300000).get_as_buffer() == b"G300000#\n"
    assert monitor_comm.CommandGo(0x300000, append_newline=False).get_as_buffer() == b"G300000#"
    assert monitor_comm.CommandSync().get_as_buffer() == b"#\n"
    assert monitor_comm.CommandVersion().get_as_buffer() == b"V#\n"

def test_command_addresses_are_zero_padded_to_5_digits():
    assert monitor_comm.CommandReadWord(0x200).get_command_text() == "w00200,4#"
    assert monitor_comm.CommandWriteByte(0x1, 0xff).get_command_text() == "O00001,FF#"
    assert monitor_comm.CommandGo(0x200).get_command_text() == "G200#"

def test_command_argument_checks():
    with pytest.raises(CommandArgumentError):
        monitor_comm.CommandWriteByte(0x300000, 0x100)
    with pytest.raises(CommandArgumentError):
        monitor_comm.CommandWriteWord(0x300000, -1)
    with pytest.raises(CommandArgumentError):
        monitor_comm.CommandReadWord(0x100000000)
    with pytest.raises(CommandArgumentError):
        monitor_comm.create_read_command(0x300000, 2)

def test_protocol_execute_against_mock_monitor():
    monitor = MockSam9Monitor()
    monitor.write_word(0x300000, 0xcafebabe)
    protocol = monitor_comm.MonitorProtocol(channel=SerialByteChannel(monitor))
    assert protocol.execute(monitor_comm.CommandSync()).raw == b"RomBOOT\n\r>"
    response = protocol.execute(monitor_comm.CommandReadWord(0x300000))
    assert response.value == 0xcafebabe
    assert monitor.commands_history == ["#", "w300000,4#"]

def test_protocol_trace_echoes_command_and_reply():
    monitor = MockSam9Monitor()
    echo = EchoRecorder()
    protocol = monitor_comm.MonitorProtocol(channel=SerialByteChannel(monitor), console=echo, trace=True)
    protocol.execute(monitor_comm.CommandReadByte(0x10))
    assert echo.data == b"o00010,1#\n\r0x00\n\r>"
    echo.data = bytearray()
    protocol.execute(monitor_comm.CommandReadByte(0x10), echo=False)
    assert echo.data == b""
