"""BeatStage: compile layered theatrical beats into scene timelines."""
