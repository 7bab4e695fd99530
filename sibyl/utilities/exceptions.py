class SibylException(Exception):
    """ Base class for all Sibyl oracle errors """

# WALLET EXCEPTIONS

class WalletNotFoundException(SibylException):
    """ This exception is raised when no wallet secret key can be loaded """
    def __init__(self, keypair_path, reason=None):
        message = f"No wallet found. Set SOLANA_PRIVATE_KEY or create a keypair file at {keypair_path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)

# RECORDING EXCEPTIONS

class RecordingException(SibylException):
    """ Base class for failures while recording a prediction """

class InvalidConfidenceException(RecordingException):
    """ This exception is raised when confidence is outside the 0-100 range (InvalidConfidence) """
    code = "InvalidConfidence"

    def __init__(self, confidence):
        self.confidence = confidence
        super().__init__(f"InvalidConfidence: Confidence must be between 0 and 100, got {confidence}")

class InvalidDeadlineException(RecordingException):
    """ This exception is raised when the deadline in hours is not positive (InvalidDeadline) """
    code = "InvalidDeadline"

    def __init__(self, hours):
        self.hours = hours
        super().__init__(f"InvalidDeadline: Deadline must be positive and fit in a u8, got {hours}")

class InvalidStatementException(RecordingException):
    """ This exception is raised when the statement is empty or does not fit the prediction account """
    def __init__(self, reason):
        super().__init__(f"Invalid prediction statement: {reason}")

class OracleNotInitializedException(RecordingException):
    """ This exception is raised when the oracle account does not exist on chain """
    def __init__(self, oracle_address):
        self.oracle_address = oracle_address
        super().__init__(f"Account does not exist: oracle {oracle_address} is not initialized")

class LedgerUnavailableException(RecordingException):
    """ This exception is raised when the Solana RPC endpoint cannot be reached """
    def __init__(self, rpc_url, reason):
        self.rpc_url = rpc_url
        super().__init__(f"Ledger unavailable at {rpc_url}: {reason}")

class LedgerTransactionException(RecordingException):
    """ This exception is raised when the ledger rejects a transaction for any other reason """
    def __init__(self, instruction, reason):
        super().__init__(f"{instruction} transaction failed: {reason}")

class LogOrderingException(RecordingException):
    """ This exception is raised when a ledger id would not advance past the last logged id """
    def __init__(self, next_id, last_logged_id):
        super().__init__(
            f"Ledger prediction id {next_id} does not follow last logged id {last_logged_id}. "
            f"The log holds local-only records ahead of the ledger; use a separate log directory."
        )

class LedgerConfirmationException(LedgerTransactionException):
    """ This exception is raised when a submitted transaction could not be confirmed """
    def __init__(self, instruction, reason):
        super().__init__(
            instruction,
            f"{reason}. The transaction was sent but not confirmed and may still land on chain; "
            f"check the explorer before running again"
        )
