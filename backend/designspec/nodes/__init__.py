"""Node System: tree model, helpers, composite detection, layout inference, collectors."""
