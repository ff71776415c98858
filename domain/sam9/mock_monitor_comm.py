# coding: utf-8
"""@brief Module implementing a fake RomBOOT monitor, behaving like a pyserial device
"""
from typing import List

PROMPT = b"\n\r>"

class MockSam9Monitor:
    """@brief Emulation of the RomBOOT monitor text protocol over an in-memory target address space

    Written bytes are accumulated until a '#' terminator, the decoded command is then executed and its reply queued for read()
    """
    def __init__(self, banner: bytes = b"RomBOOT\n\r>", version: bytes = b"v1.0 Dec 15 2007 18:16:26", chip_id: int = 0x019803a0,
                 silent_after_reads: int = None):
        """@brief Constructor
        @param banner The bytes the monitor sends after the first sync command
        @param version The version string returned by the V# command
        @param chip_id The value of the chip id register
        @param silent_after_reads If not None, the monitor stops answering after having served this number of read commands
        """
        self.memory = {}
        self.timeout = None
        self.banner = banner
        self.version = version
        self.silent_after_reads = silent_after_reads
        self.reads_served = 0
        self.commands_history: List[str] = []
        self.raw_written = bytearray()
        self._line = bytearray()
        self._output = bytearray()
        self._banner_sent = False
        self.write_word(0xfffff240, chip_id)

    def write_word(self, address: int, value: int) -> None:
        for index, byte in enumerate(value.to_bytes(4, byteorder='little')):
            self.memory[address + index] = byte

    def read_memory(self, address: int, size: int) -> bytes:
        return bytes(self.memory.get(address + index, 0) for index in range(size))

    def queue_output(self, data: bytes) -> None:
        """@brief Make the monitor spontaneously emit @p data"""
        self._output += data

    def read(self, size: int = 1) -> bytes:
        data = bytes(self._output[:size])
        del self._output[:size]
        return data

    def flush(self) -> None:
        pass

    def write(self, data: bytes) -> int:
        self.raw_written += data
        for byte in data:
            if byte == ord('#'):
                self._execute(self._line.decode('ascii'))
                self._line = bytearray()
            elif byte not in b"\r\n":
                self._line.append(byte)
        return len(data)

    def _reply(self, data: bytes) -> None:
        self._output += data

    def _serve_read(self) -> bool:
        if self.silent_after_reads is not None and self.reads_served >= self.silent_after_reads:
            return False
        self.reads_served += 1
        return True

    def _execute(self, line: str) -> None:
        self.commands_history.append(line + '#')
        if line == '':
            self._reply(PROMPT if self._banner_sent else self.banner)
            self._banner_sent = True
            return
        opcode, arguments = line[0], line[1:].split(',')
        if opcode == 'V':
            self._reply(b"\n\r" + self.version + PROMPT)
        elif opcode == 'w' and self._serve_read():
            value = int.from_bytes(self.read_memory(int(arguments[0], 16), 4), byteorder='little')
            self._reply(b"\n\r" + f'0x{value:08X}'.encode('ascii') + PROMPT)
        elif opcode == 'o' and self._serve_read():
            value = self.read_memory(int(arguments[0], 16), 1)[0]
            self._reply(b"\n\r" + f'0x{value:02X}'.encode('ascii') + PROMPT)
        elif opcode == 'W':
            self.write_word(int(arguments[0], 16), int(arguments[1], 16))
            self._reply(PROMPT)
        elif opcode == 'O':
            self.memory[int(arguments[0], 16)] = int(arguments[1], 16) & 0xff
            self._reply(PROMPT)
        elif opcode == 'G':
            self._reply(PROMPT)

    def get_commands(self, opcode: str) -> List[str]:
        """@brief Get the history of executed commands starting with @p opcode"""
        return [command for command in self.commands_history if command.startswith(opcode)]
