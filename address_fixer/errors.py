"""Exception types raised by the address-fixing engine."""


class AddressFixerError(Exception):
    """Base class for engine failures."""


class InputValidationError(AddressFixerError, ValueError):
    """The caller supplied input the engine cannot act on (empty query, bad page index)."""


class DocumentIOError(AddressFixerError):
    """The PDF bytes could not be opened or parsed."""


class CompositionError(AddressFixerError):
    """Drawing the overlay or serializing the result failed."""


class BusyError(AddressFixerError):
    """A process request arrived while another one is still running."""
