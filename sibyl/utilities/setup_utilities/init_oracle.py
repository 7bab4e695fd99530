from loguru import logger
from sibyl.models.models import OracleState
from sibyl.protocols.oracle_program import OracleProgramClient
from sibyl.utilities.exceptions import SibylException

def print_oracle_state(state: OracleState):
    print(f"   Authority: {state.authority}")
    print(f"   Prediction Count: {state.prediction_count}")
    print(f"   Correct Predictions: {state.correct_predictions}")

async def init_oracle(oracle_program: OracleProgramClient, explorer_tx_url) -> int:
    """
    Initialize the oracle account with the loaded wallet as authority.

    An already initialized oracle is reported and left untouched.
    Returns the process exit code.
    """
    print("Initializing Sibyl Oracle on Solana")
    print("=" * 50 + "\n")
    print(f"Oracle PDA: {oracle_program.oracle_address}")

    try:
        state = await oracle_program.fetch_oracle_state_nullable()
        if state is not None:
            print("Oracle already initialized")
            print_oracle_state(state)
            return 0

        print("Initializing oracle...")
        tx = await oracle_program.initialize()
        print(f"Initialization TX: {tx}")
        print(f"   {explorer_tx_url(tx)}\n")

        state = await oracle_program.fetch_oracle_state()
        print("Oracle successfully initialized!")
        print_oracle_state(state)
        return 0

    except SibylException as e:
        logger.error(f"init_oracle: Initialization failed: {e}")
        print(f"Initialization failed: {e}")
        return 1
