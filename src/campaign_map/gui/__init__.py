"""Qt desktop front end for the campaign map."""
