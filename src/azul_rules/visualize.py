import matplotlib.pyplot as plt


def plot_score_history(score_history: list[list[int]], names: list[str] | None = None) -> plt.Figure:
    fig, ax = plt.subplots(figsize=(6, 4))
    players = len(score_history[0])
    if names is None:
        names = [f"Player {p + 1}" for p in range(players)]
    for p in range(players):
        ax.plot([s[p] for s in score_history], label=names[p])
    ax.set_xlabel("Move")
    ax.set_ylabel("Score")
    ax.legend()
    ax.grid(True, alpha=0.3)
    fig.tight_layout()
    return fig
