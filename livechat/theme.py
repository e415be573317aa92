"""Theme definition for livechat."""

from textual.theme import Theme

LIVECHAT_THEME = Theme(
    name="livechat",
    primary="#3b82f6",
    secondary="#334455",
    accent="#22c55e",
    background="black",
    surface="#111111",
    panel="#333333",  # Used for borders and date header pills
    dark=True,
)

# Export individual colors for use in Python code (e.g., Rich Text styling)
PRIMARY = LIVECHAT_THEME.primary
