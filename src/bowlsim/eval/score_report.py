from __future__ import annotations
import argparse
from pathlib import Path

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

OUTCOME_ORDER = ["returned", "settled", "gutter", "fell_off", "out_of_bounds"]

def read_sims(path: str) -> pd.DataFrame:
    return pd.read_csv(path) if str(path).endswith(".csv") else pd.read_parquet(path)

def final_scores(df: pd.DataFrame) -> pd.Series:
    return df.groupby("game")["total"].last()

def stats(x: pd.Series) -> dict:
    x = x.dropna()
    if len(x) == 0:
        return dict(n=0, mean=np.nan, std=np.nan, p10=np.nan, p50=np.nan, p90=np.nan)
    return dict(n=len(x), mean=x.mean(), std=x.std(), p10=x.quantile(.1),
                p50=x.quantile(.5), p90=x.quantile(.9))

def mark_rates(df: pd.DataFrame) -> pd.DataFrame:
    """Strikes and spares per game."""
    per_game = df.groupby("game")["mark"].agg(
        strikes=lambda m: int((m == "X").sum()),
        spares=lambda m: int((m == "/").sum()),
    )
    return per_game.describe().loc[["mean", "min", "max"]].round(2)

def plot_scores(scores: pd.Series, out_png: Path) -> None:
    plt.figure(figsize=(6, 4))
    plt.hist(scores, bins=np.arange(0, 301, 10), density=True)
    plt.xlabel("final score"); plt.ylabel("density"); plt.title("Final score distribution")
    plt.tight_layout(); plt.savefig(out_png); plt.close()

def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--sims", required=True)
    ap.add_argument("--out", default="runs/report.md")
    args = ap.parse_args()

    out_dir = Path(args.out).parent; out_dir.mkdir(parents=True, exist_ok=True)
    sims = read_sims(args.sims)

    scores = final_scores(sims)
    score_tbl = pd.DataFrame({"final": stats(scores)}).round(2)
    outcomes = sims["outcome"].value_counts(normalize=True).reindex(OUTCOME_ORDER).fillna(0).round(3)
    png = out_dir / "score_hist.png"
    plot_scores(scores, png)

    with open(args.out, "w") as f:
        f.write("# Simulated Bowling Report\n\n")
        f.write(f"- Games: **{len(scores):,}**, balls: **{len(sims):,}** from `{args.sims}`\n\n")
        f.write("## Final scores\n\n")
        f.write(score_tbl.to_string() + "\n\n")
        f.write(f"![Final scores]({png.name})\n\n")
        f.write("## Strikes / spares per game\n\n")
        f.write(mark_rates(sims).to_string() + "\n\n")
        f.write("## Throw outcomes\n\n")
        f.write(outcomes.to_string() + "\n")
    print("Wrote", args.out)

if __name__ == "__main__":
    main()
