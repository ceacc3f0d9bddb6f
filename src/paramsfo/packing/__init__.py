"""Binary layout engine for PARAM.SFO (codec, planner, writer, reader)."""
