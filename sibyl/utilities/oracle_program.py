# Standard library imports
from typing import Optional, List
import hashlib
import re
import struct
import traceback

# Third party imports
import httpx
from loguru import logger
from solana.exceptions import SolanaRpcException
from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Confirmed
from solana.rpc.core import RPCException, TransactionExpiredBlockheightExceededError, UnconfirmedTxError
from solana.rpc.types import TxOpts
from solders.instruction import AccountMeta, Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.system_program import ID as SYSTEM_PROGRAM_ID
from solders.transaction import Transaction

# Sibyl imports
import sibyl.configuration.constants as global_constants
from sibyl.configuration.configuration import OracleConfig
from sibyl.models.models import OracleState, Prediction
from sibyl.utilities.exceptions import (
    InvalidConfidenceException,
    InvalidDeadlineException,
    LedgerConfirmationException,
    LedgerTransactionException,
    LedgerUnavailableException,
    OracleNotInitializedException,
)

ORACLE_ACCOUNT_SIZE = 8 + 32 + 8 + 8

PROGRAM_ERROR_PATTERNS = [
    (re.compile(r"custom program error: 0x([0-9a-fA-F]+)"), 16),
    (re.compile(r"Error Number: (\d+)"), 10),
    (re.compile(r"Custom\((\d+)\)"), 10),  # InstructionErrorCustom(6000)
]

def instruction_discriminator(name: str) -> bytes:
    """Anchor instruction discriminator: first 8 bytes of sha256("global:<name>")"""
    return hashlib.sha256(f"global:{name}".encode('utf-8')).digest()[:8]

def account_discriminator(name: str) -> bytes:
    """Anchor account discriminator: first 8 bytes of sha256("account:<Name>")"""
    return hashlib.sha256(f"account:{name}".encode('utf-8')).digest()[:8]

def encode_string(value: str) -> bytes:
    """Borsh string: u32 little-endian byte length followed by UTF-8 bytes"""
    encoded = value.encode('utf-8')
    return struct.pack('<I', len(encoded)) + encoded

def encode_create_prediction_data(prediction: Prediction) -> bytes:
    return (
        instruction_discriminator('create_prediction')
        + encode_string(prediction.statement)
        + struct.pack('<BB', prediction.confidence, prediction.hours)
    )

def decode_oracle_account(data: bytes) -> OracleState:
    """Decode Oracle { authority: Pubkey, prediction_count: u64, correct_predictions: u64 }"""
    if len(data) < ORACLE_ACCOUNT_SIZE:
        raise ValueError(f"Oracle account data too short: {len(data)} bytes")
    if bytes(data[:8]) != account_discriminator('Oracle'):
        raise ValueError("Account data is not a sibyl_oracle Oracle account")

    authority = Pubkey.from_bytes(bytes(data[8:40]))
    prediction_count, correct_predictions = struct.unpack_from('<QQ', bytes(data), 40)
    return OracleState(
        authority=str(authority),
        prediction_count=prediction_count,
        correct_predictions=correct_predictions,
    )

def parse_program_error_code(message: str) -> Optional[int]:
    """Extract a custom program error code from an RPC error message, if any"""
    for pattern, base in PROGRAM_ERROR_PATTERNS:
        match = pattern.search(message)
        if match:
            return int(match.group(1), base)
    return None

def find_oracle_address(program_id: Pubkey) -> Pubkey:
    address, _bump = Pubkey.find_program_address([global_constants.ORACLE_SEED], program_id)
    return address

def find_prediction_address(program_id: Pubkey, prediction_id: int) -> Pubkey:
    """Prediction PDA from seeds [b"prediction", prediction_id as u64 LE]"""
    address, _bump = Pubkey.find_program_address(
        [global_constants.PREDICTION_SEED, struct.pack('<Q', prediction_id)],
        program_id
    )
    return address

class OracleProgramClient:
    """Client for the sibyl_oracle program: account lookups and instruction submission"""

    def __init__(
            self,
            oracle_config: OracleConfig,
            wallet: Keypair,
            client: Optional[AsyncClient] = None
        ):
        self.oracle_config = oracle_config
        self.rpc_url = oracle_config.rpc_url
        self.wallet = wallet
        self.program_id = Pubkey.from_string(oracle_config.program_id)
        self.oracle_address = find_oracle_address(self.program_id)
        self.client = client or AsyncClient(self.rpc_url, commitment=Confirmed)
        logger.debug(f"OracleProgramClient: Using RPC endpoint {self.rpc_url}, oracle PDA {self.oracle_address}")

    def prediction_address(self, prediction_id: int) -> Pubkey:
        return find_prediction_address(self.program_id, prediction_id)

    async def fetch_oracle_state_nullable(self) -> Optional[OracleState]:
        """Fetch the oracle account, returning None if it does not exist"""
        try:
            response = await self.client.get_account_info(self.oracle_address, commitment=Confirmed)
        except (httpx.HTTPError, SolanaRpcException, OSError) as e:
            logger.error(f"OracleProgramClient.fetch_oracle_state_nullable: RPC request failed: {e}")
            raise LedgerUnavailableException(self.rpc_url, e) from e
        except RPCException as e:
            raise LedgerTransactionException('get_account_info', e) from e

        if response.value is None:
            return None
        try:
            return decode_oracle_account(response.value.data)
        except ValueError as e:
            raise LedgerTransactionException('get_account_info', e) from e

    async def fetch_oracle_state(self) -> OracleState:
        """Fetch the oracle account. Raises OracleNotInitializedException if missing."""
        state = await self.fetch_oracle_state_nullable()
        if state is None:
            raise OracleNotInitializedException(self.oracle_address)
        return state

    def _create_prediction_instruction(self, prediction_id: int, prediction: Prediction) -> Instruction:
        accounts = [
            AccountMeta(self.oracle_address, is_signer=False, is_writable=True),
            AccountMeta(self.prediction_address(prediction_id), is_signer=False, is_writable=True),
            AccountMeta(self.wallet.pubkey(), is_signer=True, is_writable=True),
            AccountMeta(SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
        ]
        return Instruction(self.program_id, encode_create_prediction_data(prediction), accounts)

    def _initialize_instruction(self) -> Instruction:
        accounts = [
            AccountMeta(self.oracle_address, is_signer=False, is_writable=True),
            AccountMeta(self.wallet.pubkey(), is_signer=True, is_writable=True),
            AccountMeta(SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
        ]
        return Instruction(self.program_id, instruction_discriminator('initialize'), accounts)

    async def create_prediction(self, prediction_id: int, prediction: Prediction) -> str:
        """Submit create_prediction for the given id and return the transaction signature"""
        instruction = self._create_prediction_instruction(prediction_id, prediction)
        return await self._send([instruction], 'create_prediction', prediction)

    async def initialize(self) -> str:
        """Submit initialize, making the wallet the oracle authority"""
        return await self._send([self._initialize_instruction()], 'initialize')

    async def _send(self, instructions: List[Instruction], name: str, prediction: Optional[Prediction] = None) -> str:
        """
        Sign, submit and confirm a transaction, returning its signature.

        Failures before the transaction is accepted raise LedgerUnavailableException
        or a translated program error. Once it has been accepted, any failure to
        confirm raises LedgerConfirmationException, since it may still land on chain.
        """
        try:
            blockhash_response = await self.client.get_latest_blockhash(Confirmed)
            transaction = Transaction.new_signed_with_payer(
                instructions,
                self.wallet.pubkey(),
                [self.wallet],
                blockhash_response.value.blockhash
            )
            logger.debug(f"OracleProgramClient._send: Submitting {name} from {self.wallet.pubkey()}")
            response = await self.client.send_transaction(
                transaction,
                opts=TxOpts(skip_confirmation=True, preflight_commitment=Confirmed)
            )
        except (httpx.HTTPError, SolanaRpcException, OSError) as e:
            logger.error(f"OracleProgramClient._send: RPC request failed: {e}")
            raise LedgerUnavailableException(self.rpc_url, e) from e
        except RPCException as e:
            logger.error(f"OracleProgramClient._send: {name} rejected: {e}")
            logger.debug(traceback.format_exc())
            raise self._translate_program_error(e, name, prediction) from e

        signature = response.value
        try:
            await self.client.confirm_transaction(
                signature,
                Confirmed,
                last_valid_block_height=blockhash_response.value.last_valid_block_height
            )
        except (
            UnconfirmedTxError,
            TransactionExpiredBlockheightExceededError,
            httpx.HTTPError,
            SolanaRpcException,
            RPCException,
            OSError,
        ) as e:
            logger.error(f"OracleProgramClient._send: {name} {signature} not confirmed: {e}")
            raise LedgerConfirmationException(name, f"{signature}: {e}") from e

        logger.debug(f"OracleProgramClient._send: {name} confirmed with signature {signature}")
        return str(signature)

    def _translate_program_error(self, error: RPCException, name: str, prediction: Optional[Prediction]) -> Exception:
        code = parse_program_error_code(str(error))
        if code == global_constants.ERROR_CODE_INVALID_CONFIDENCE:
            return InvalidConfidenceException(prediction.confidence if prediction else None)
        if code == global_constants.ERROR_CODE_INVALID_DEADLINE:
            return InvalidDeadlineException(prediction.hours if prediction else None)
        if code == global_constants.ANCHOR_ACCOUNT_NOT_INITIALIZED:
            return OracleNotInitializedException(self.oracle_address)
        return LedgerTransactionException(name, error)

    async def close(self):
        await self.client.close()
