"""Pure emissions, credit and ranking engines. No I/O lives here."""
