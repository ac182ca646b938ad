class Chip8Error(Exception):
    """Fatal emulation error. The driver stops stepping when it sees one."""


class StackUnderflowError(Chip8Error):
    def __init__(self, pc):
        super().__init__("Stack underflow on 00EE at 0x%03X" % pc)
        self.pc = pc


class MemoryAccessError(Chip8Error):
    def __init__(self, address, reason="out of bounds"):
        super().__init__("Memory access %s: 0x%03X" % (reason, address))
        self.address = address
        self.reason = reason


class ProgramTooLargeError(MemoryAccessError):
    def __init__(self, size, limit):
        super().__init__(0x200 + size, "program too large (%d > %d bytes)" % (size, limit))
        self.size = size
        self.limit = limit
