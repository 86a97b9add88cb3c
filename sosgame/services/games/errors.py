"""Errors raised by the SOS game services.

Every error carries a human-readable ``message`` which the socket layer
sends back to the connection that caused it.
"""


class SOSError(Exception):
    """Base class for every rule or session failure."""

    message = 'Operation failed'

    def __init__(self, message=None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class RoomNotFound(SOSError):
    message = 'Room not found'


class RoomFull(SOSError):
    message = 'Room is full'


class NotYourTurn(SOSError):
    message = 'It is not your turn'


class CellOccupied(SOSError):
    message = 'This cell is already filled'


class OutOfBounds(SOSError):
    message = 'Cell is outside the board'


class InvalidLetter(SOSError):
    message = "Letter must be 'S' or 'O'"


class GameNotInProgress(SOSError):
    message = 'Game is not in progress'


class RoomIdsExhausted(SOSError):
    message = 'Could not allocate a free room id'


class InvalidPayload(SOSError):
    message = 'Invalid request payload'


class PersistenceFailure(SOSError):
    message = 'Could not save game state'
