# coding: utf-8
"""@brief Module chaining the RomBOOT utility steps (banner, cpu id, send, receive, verify, dump, terminal, go) over one serial link
"""
from domain.boot_config import BootConfiguration
from domain.byte_channel import ByteChannel
from domain.errors import Sam9BootError
from domain.ext_adapters_interface.image_file_interface import ImageFileHandler
from domain.memory_image import MemoryImage
from domain.transfer_context import TransferContext
import domain.sam9.monitor_comm as comm
import domain.sam9.transfer_tools as ttools

class Sam9BootSession:
    """@brief One run of the utility against an already opened serial link

    Steps run in a fixed order and the first failing step skips all following ones, except the interactive terminal
    """
    def __init__(self, config: BootConfiguration, target: ByteChannel, console: ByteChannel, logger,
                 image_files: ImageFileHandler, progressbar_factory, terminal_factory=None):
        """@brief Constructor
        @param config The validated configuration
        @param target The byte channel connected to the monitor
        @param console The byte channel connected to the user's console
        @param logger A logger to use
        @param image_files The handler used to load and save image files
        @param progressbar_factory A factory generating progress bar instances
        @param terminal_factory A callable returning a TerminalPassThrough-like object (with a run() method) for a go address
        """
        self.config = config
        self.console = console
        self.logger = logger
        self.image_files = image_files
        self.terminal_factory = terminal_factory
        self.protocol = comm.MonitorProtocol(channel=target, console=console, trace=config.trace, quiet_window=config.quiet_window)
        self.context = TransferContext(progressbar_factory=progressbar_factory,
                                       logger=logger,
                                       target_command_executor=self.protocol.execute)
        self.file_image: MemoryImage = None
        self.memory_image: MemoryImage = None

    def _print(self, text: str) -> None:
        self.console.write(text.encode('ascii', errors='replace'))

    def _greet_target(self) -> None:
        """@brief Sync with the monitor and display its banner and version (unless quiet)
        """
        echo = not self.config.quiet
        self.protocol.execute(comm.CommandSync(), echo=echo)
        if not self.config.quiet:
            self.protocol.execute(comm.CommandVersion(), echo=True)

    def _query_cpu(self) -> None:
        chip_id = ttools.query_chip_id(self.context)
        self._print(f"PartId = ${chip_id:08X}\n")

    def _load_file_image(self) -> None:
        self.file_image = self.image_files.read_image_from(self.config.filename, start_address=self.config.start_address,
                                                           byte_count=self.config.byte_count)
        if self.config.byte_count is None:
            self.config.byte_count = self.file_image.size
        self.logger.info(f"Loaded file '{self.config.filename}' ({self.file_image.size} bytes) from disk.")

    def _write_received_file(self) -> None:
        self.image_files.write_image_to(self.config.filename, self.memory_image)
        self.logger.info(f"Wrote {self.memory_image.size} bytes to file '{self.config.filename}'.")

    def _dump(self) -> None:
        self._print("\n")
        for line in self.memory_image.format_dump_lines():
            self._print(line + "\n")

    def run_transfer_steps(self) -> None:
        """@brief Run all non-interactive steps
        @warning Raises a Sam9BootError subclass on the first failing step
        """
        config = self.config
        self._greet_target()
        if config.cpu:
            self._query_cpu()
        self.protocol.read_response()
        self._print("\n")
        if config.needs_file_image():
            self._load_file_image()
        if config.send:
            ttools.sam9_upload_cmd(self.context, self.file_image, source_name=config.filename)
        if config.needs_memory_image():
            self.memory_image = ttools.sam9_download_cmd(self.context, start_address=config.start_address, count=config.byte_count)
        if config.verify:
            ttools.verify_memory(self.context, expected=self.file_image, memory_image=self.memory_image)
        if config.receive:
            self._write_received_file()
        if config.dump:
            self._dump()

    def run(self) -> bool:
        """@brief Run the whole session
        @return True on success
        """
        success = True
        try:
            self.run_transfer_steps()
        except Sam9BootError as e:
            self.logger.error(str(e))
            success = False
        if self.config.interactive:
            self.terminal_factory(self.config.go_address).run()
        elif success and self.config.go_address is not None:
            ttools.sam9_go_cmd(self.context, self.config.go_address)
        return success
