"""Result values, tagged errors, and logging setup."""
