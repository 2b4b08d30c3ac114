"""Components of the fee market: parameters, state, admission, settlement and lifecycle."""
