# coding: utf-8
import pytest
import random
from typing import List

from adapters.mock_logger import MockLogger, ERROR, INFO, DEBUG
from adapters.mock_progressbar import MockProgressBar, MockProgressBarFactory
from adapters.progressbar_silent import SilentProgressBarFactory
from domain.byte_channel import SerialByteChannel
from domain.errors import ConfigurationError, TargetUnresponsiveError, VerifyMismatchError
from domain.memory_image import MemoryImage
from domain.transfer_context import TransferContext
import domain.sam9.monitor_comm as monitor_comm
import domain.sam9.transfer_tools as transfer_tools
from domain.sam9.mock_monitor_comm import MockSam9Monitor

SAMPLE_ADDRESS = 0x300000

def create_monitor_context(monitor: MockSam9Monitor, progressbar_factory=SilentProgressBarFactory) -> TransferContext:
    protocol = monitor_comm.MonitorProtocol(channel=SerialByteChannel(monitor))
    return TransferContext(progressbar_factory=progressbar_factory,
                           logger=MockLogger(DEBUG),
                           target_command_executor=protocol.execute)

def chunk_widths(count: int) -> List[int]:
    return list(transfer_tools.TransferCursor(start_address=SAMPLE_ADDRESS, count=count).iter_chunks())

@pytest.mark.parametrize("count, expected_widths", [
    (1, [1]),
    (3, [1, 1, 1]),
    (4, [4]),
    (6, [4, 1, 1]),
    (8, [4, 4]),
    (11, [4, 4, 1, 1, 1]),
])
def test_chunk_width_sequence(count, expected_widths):
    assert chunk_widths(count) == expected_widths

def test_chunk_width_never_goes_back_to_words():
    for count in range(1, 70):
        widths = chunk_widths(count)
        assert sum(widths) == count
        first_byte_chunk = widths.index(1) if 1 in widths else len(widths)
        assert all(width == 4 for width in widths[:first_byte_chunk])
        assert all(width == 1 for width in widths[first_byte_chunk:])
        assert len(widths) - first_byte_chunk == count % 4

def test_cursor_offset_tracks_address():
    cursor = transfer_tools.TransferCursor(start_address=SAMPLE_ADDRESS, count=10)
    for _ in cursor.iter_chunks():
        assert cursor.offset == cursor.address - SAMPLE_ADDRESS
    assert cursor.offset == 10
    assert cursor.is_done()

def test_download_6_bytes_uses_one_word_then_two_bytes():
    monitor = MockSam9Monitor()
    monitor.memory.update({SAMPLE_ADDRESS + i: v for i, v in enumerate(b'\x01\x02\x03\x04\x05\x06')})
    context = create_monitor_context(monitor)

    # When downloading 6 bytes
    image = transfer_tools.download_memory(context, start_address=SAMPLE_ADDRESS, count=6)

    # Then one word read and two byte reads should have been issued
    assert monitor.commands_history == ["w300000,4#", "o300004,1#", "o300005,1#"]
    assert image.get_content() == bytearray(b'\x01\x02\x03\x04\x05\x06')
    assert image.start_address == SAMPLE_ADDRESS
    assert image.size == 6

def test_upload_6_bytes_uses_one_word_then_two_bytes():
    monitor = MockSam9Monitor()
    context = create_monitor_context(monitor)
    uploaded = transfer_tools.upload_memory(context, MemoryImage(SAMPLE_ADDRESS, b'\x01\x02\x03\x04\x05\x06'))
    assert uploaded == 6
    assert monitor.commands_history == ["W300000,04030201#", "O300004,05#", "O300005,06#"]

def test_download_unpacks_little_endian_values():
    def fake_read_handler(command: monitor_comm.MonitorCommand):
        if isinstance(command, monitor_comm.CommandReadWord):
            return monitor_comm.MonitorResponse(value=0x44332211, raw=b'0x44332211')
        return monitor_comm.MonitorResponse(value=0x55, raw=b'0x55')

    context = TransferContext(progressbar_factory=SilentProgressBarFactory, logger=MockLogger(), target_command_executor=fake_read_handler)
    image = transfer_tools.download_memory(context, start_address=SAMPLE_ADDRESS, count=5)
    assert image.get_content() == bytearray(b'\x11\x22\x33\x44\x55')

def test_download_value_missing_in_reply_reads_as_zero():
    def fake_read_handler(command: monitor_comm.MonitorCommand):
        return monitor_comm.MonitorResponse(value=0, raw=b'\n\r>')

    context = TransferContext(progressbar_factory=SilentProgressBarFactory, logger=MockLogger(), target_command_executor=fake_read_handler)
    image = transfer_tools.download_memory(context, start_address=SAMPLE_ADDRESS, count=8)
    assert image.get_content() == bytearray(8)

def test_4096_bytes_scenario():
    content = bytes(random.getrandbits(8) for _ in range(4096))
    monitor = MockSam9Monitor()
    context = create_monitor_context(monitor)

    # When uploading then downloading 4096 bytes at 0x300000
    transfer_tools.upload_memory(context, MemoryImage(SAMPLE_ADDRESS, content))
    image = transfer_tools.download_memory(context, start_address=SAMPLE_ADDRESS, count=4096)

    # Then exactly 1024 word writes and 1024 word reads should have been sent, and verify should succeed
    assert len(monitor.get_commands('W')) == 1024
    assert len(monitor.get_commands('w')) == 1024
    assert len(monitor.get_commands('O')) == 0
    assert len(monitor.get_commands('o')) == 0
    transfer_tools.verify_memory(context, expected=MemoryImage(SAMPLE_ADDRESS, content), memory_image=image)
    assert "Verified memory at $300000 (4096 bytes)." in context.logger.messages(INFO)

@pytest.mark.parametrize("count", [1, 2, 3, 4, 5, 7, 255, 257, 1023, 2050, 5003])
def test_upload_download_round_trip(count):
    content = bytes(random.getrandbits(8) for _ in range(count))
    monitor = MockSam9Monitor()
    context = create_monitor_context(monitor)
    transfer_tools.upload_memory(context, MemoryImage(SAMPLE_ADDRESS, content))
    image = transfer_tools.download_memory(context, start_address=SAMPLE_ADDRESS, count=count)
    assert bytes(image.get_content()) == content
    assert monitor.read_memory(SAMPLE_ADDRESS, count) == content

def test_unresponsive_target_during_download():
    # The monitor stops answering after 25 word reads, ie at offset 100
    monitor = MockSam9Monitor(silent_after_reads=25)
    context = create_monitor_context(monitor)

    with pytest.raises(TargetUnresponsiveError) as excinfo:
        transfer_tools.download_memory(context, start_address=SAMPLE_ADDRESS, count=1000)

    assert excinfo.value.transferred == 100
    assert excinfo.value.expected == 1000
    assert excinfo.value.address == SAMPLE_ADDRESS + 100
    assert "100 bytes" in str(excinfo.value)
    assert "1000 expected" in str(excinfo.value)
    # No command should be sent after the unanswered one
    assert len(monitor.get_commands('w')) == 26

def test_download_progress_every_256_bytes():
    MockProgressBarFactory.reset()
    monitor = MockSam9Monitor()
    context = create_monitor_context(monitor, progressbar_factory=MockProgressBarFactory)
    transfer_tools.sam9_download_cmd(context, start_address=SAMPLE_ADDRESS, count=1030)
    bar: MockProgressBar = MockProgressBar.instances[0]
    assert bar.max_value == 1030
    assert bar.updates_history == [0, 256, 512, 768, 1024]
    assert bar.finished
    assert "Downloaded memory from $300000 (1030 bytes)." in context.logger.messages(INFO)

def test_upload_cmd_summary():
    MockProgressBarFactory.reset()
    monitor = MockSam9Monitor()
    context = create_monitor_context(monitor, progressbar_factory=MockProgressBarFactory)
    transfer_tools.sam9_upload_cmd(context, MemoryImage(SAMPLE_ADDRESS, b'\xaa' * 512), source_name='at91bootstrap.bin')
    assert MockProgressBar.instances[0].updates_history == [0, 256, 512]
    assert "Uploaded file 'at91bootstrap.bin' (512 bytes) to memory at $300000." in context.logger.messages(INFO)

def test_find_first_mismatch():
    assert transfer_tools.find_first_mismatch(b'abcdef', b'abcdef', 6) is None
    assert transfer_tools.find_first_mismatch(b'abcdef', b'abXdeY', 6) == 2
    assert transfer_tools.find_first_mismatch(b'abc', b'abcdef', 6) == 3
    assert transfer_tools.find_first_mismatch(b'abcdef', b'Xbcdef', 6) == 0

def test_verify_is_deterministic():
    reference = MemoryImage(SAMPLE_ADDRESS, b'\x00\x01\x02\x03\x04\x05\x06\x07')
    context = TransferContext(progressbar_factory=SilentProgressBarFactory, logger=MockLogger(), target_command_executor=lambda c: None)
    for _ in range(2):
        transfer_tools.verify_memory(context, expected=reference, memory_image=MemoryImage(SAMPLE_ADDRESS, reference.get_content()))
        with pytest.raises(VerifyMismatchError) as excinfo:
            transfer_tools.verify_memory(context, expected=reference, memory_image=MemoryImage(SAMPLE_ADDRESS, b'\x00\x01\xff\x03\x04\xff\x06\x07'))
        assert excinfo.value.offset == 2
        assert "error at offset 2" in str(excinfo.value)

def test_verify_zero_length_is_an_error():
    context = TransferContext(progressbar_factory=SilentProgressBarFactory, logger=MockLogger(), target_command_executor=lambda c: None)
    with pytest.raises(ConfigurationError):
        transfer_tools.verify_memory(context, expected=MemoryImage(SAMPLE_ADDRESS, b''), memory_image=MemoryImage(SAMPLE_ADDRESS, b''))

def test_query_chip_id():
    monitor = MockSam9Monitor(chip_id=0x019803a0)
    context = create_monitor_context(monitor)
    assert transfer_tools.query_chip_id(context) == 0x019803a0
    assert monitor.commands_history == ["wFFFFF240,4#"]

def test_query_chip_id_unresponsive():
    monitor = MockSam9Monitor(silent_after_reads=0)
    context = create_monitor_context(monitor)
    with pytest.raises(TargetUnresponsiveError):
        transfer_tools.query_chip_id(context)

def test_go_cmd():
    monitor = MockSam9Monitor()
    context = create_monitor_context(monitor)
    transfer_tools.sam9_go_cmd(context, 0x300000)
    assert monitor.raw_written == bytearray(b"G300000#\n")
