"""Generate a tiny synthetic clip for testing using FFmpeg."""
from __future__ import annotations

import subprocess
from pathlib import Path


def main(output: Path = Path("sample_clip.mp4"), duration: int = 120, fps: int = 10) -> None:
    size = "320x180"
    filters = ",".join([
        "hue=h=t*3",
        "drawbox=x=20+(w-80)*(t/{d}):y=h/3:w=40:h=40:color=white@1:t=fill".format(d=duration),
    ])
    cmd = [
        "ffmpeg",
        "-hide_banner",
        "-loglevel",
        "error",
        "-y",
        "-f",
        "lavfi",
        "-i",
        f"testsrc2=s={size}:d={duration}:r={fps}",
        "-vf",
        filters,
        "-pix_fmt",
        "yuv420p",
        str(output),
    ]
    subprocess.run(cmd, check=True)
    print(f"Wrote {output}")


if __name__ == "__main__":
    main()
