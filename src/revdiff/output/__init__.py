"""Result reporters."""
