"""The Floor: turn engine and game-master API for a territory-conquest trivia game."""
