# helpers/logger.py
import numpy as np
import csv, json, datetime, pathlib
import matplotlib.pyplot as plt
import matplotlib.cm as colormap


class RunLogger:
    """Per-layer timing trace (csv/json) plus feature-map and timing plots."""

    FIELDS = ["step", "index", "layer", "phase", "dims", "time_s"]

    def __init__(self, root="runs", tag="run"):
        ts = datetime.datetime.now().strftime("%Y%m%d-%H%M%S")
        self.root = pathlib.Path(root)
        self.dir = self.root / f"{tag}_{ts}"
        self.dir.mkdir(parents=True, exist_ok=True)
        self.csv_path = self.dir / "trace.csv"
        self.json_path = self.dir / "trace.json"
        self.rows = []  # list of dicts, one per layer call
        self._csv_header_written = False

    # ---------- logging ----------
    def log_layer(self, step, index, layer, phase, time_s):
        row = {
            "step": int(step),
            "index": int(index),
            "layer": layer.name(),
            "phase": phase,
            "dims": "x".join(str(d) for d in layer.dims()),
            "time_s": float(time_s),
        }
        self.rows.append(row)
        with open(self.csv_path, "a", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=self.FIELDS)
            if not self._csv_header_written:
                writer.writeheader()
                self._csv_header_written = True
            writer.writerow(row)

    def save_json(self):
        with open(self.json_path, "w") as f:
            json.dump(self.rows, f, indent=2)
        return str(self.json_path)

    # ---------- plotting ----------
    def _plots_dir(self, subdir):
        out = self.dir / subdir
        out.mkdir(parents=True, exist_ok=True)
        return out

    def plot_feature_maps(self, tensor, tag="output", subdir="plots", max_slices=16):
        """
        Saves one heatmap per depth slice of `tensor` as feature_maps_<tag>.png.
        Slices are drawn as (y rows, x columns).
        """
        maps = tensor.to_numpy()
        n = min(maps.shape[2], max_slices)
        if n == 0:
            return None
        cols = int(np.ceil(np.sqrt(n)))
        rows = int(np.ceil(n / cols))

        outdir = self._plots_dir(subdir)
        fig, axes = plt.subplots(rows, cols, figsize=(2.5 * cols, 2.5 * rows), squeeze=False)
        for k, ax in enumerate(axes.flat):
            ax.axis("off")
            if k < n:
                ax.imshow(maps[:, :, k].T, interpolation="nearest", cmap=colormap.viridis)
                ax.set_title(f"d={k}", fontsize=8)
        fig.suptitle(f"Feature maps ({tag})")
        fig.tight_layout()
        path = outdir / f"feature_maps_{tag}.png"
        fig.savefig(path, dpi=120)
        plt.close(fig)
        return str(path)

    def plot_timings(self, tag="run", subdir="plots"):
        """
        Saves mean forward/backward time per layer as layer_timings_<tag>.png.
        """
        if not self.rows:
            return None
        labels = sorted({(r["index"], r["layer"]) for r in self.rows})
        x = np.arange(len(labels))

        outdir = self._plots_dir(subdir)
        plt.figure()
        width = 0.4
        for offset, phase in ((-width / 2, "forward"), (width / 2, "backward")):
            means = []
            for idx, _ in labels:
                ts = [r["time_s"] for r in self.rows if r["index"] == idx and r["phase"] == phase]
                means.append(np.mean(ts) if ts else 0.0)
            plt.bar(x + offset, means, width=width, label=phase)
        plt.xticks(x, [f"{i}:{name}" for i, name in labels], rotation=45)
        plt.ylabel("Seconds")
        plt.title(f"Layer timings ({tag})")
        plt.legend()
        plt.tight_layout()
        path = outdir / f"layer_timings_{tag}.png"
        plt.savefig(path, dpi=160)
        plt.close()
        return str(path)
