from sibyl.protocols.oracle_program import OracleProgramClient
from sibyl.utilities.exceptions import SibylException, OracleNotInitializedException
from sibyl.utilities.setup_utilities.init_oracle import print_oracle_state

async def oracle_status(oracle_program: OracleProgramClient) -> int:
    """Print the on-chain oracle state. Returns 1 if it cannot be read or is not initialized."""
    print(f"Oracle PDA: {oracle_program.oracle_address}")
    try:
        state = await oracle_program.fetch_oracle_state()
    except SibylException as e:
        print(f"Could not read oracle: {e}")
        if isinstance(e, OracleNotInitializedException):
            print("Run 'sibyl init' to initialize the oracle.")
        return 1

    print_oracle_state(state)
    print(f"   Accuracy: {state.accuracy}%")
    return 0
