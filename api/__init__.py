"""HTTP API for the league table predictor."""
