from __future__ import annotations

import argparse
import base64
import logging
import mimetypes
import time
from pathlib import Path

from dotenv import load_dotenv
from tqdm import tqdm

from chroma_sticker.config import FLOOD_TOLERANCE, ISLAND_TOLERANCE, STROKE_COLOR, STROKE_THICKNESS
from chroma_sticker.contracts import AspectRatio, GeneratedImage
from chroma_sticker.io import decode_base64_image, load_image, save_png
from chroma_sticker.pipeline import (
    add_sticker_stroke,
    edit_with_prompt,
    enhance_image,
    process_file,
    remove_background_with_chroma_key,
)


def _iter_images(input_dir: Path):
    exts = {".jpg", ".jpeg", ".png", ".webp", ".bmp", ".tif", ".tiff"}
    for p in sorted(input_dir.rglob("*")):
        if p.is_file() and p.suffix.lower() in exts:
            yield p


def _run_key(args, images, input_dir: Path, output_dir: Path) -> None:
    for img_path in tqdm(images, desc="Keying", unit="img"):
        out_path = (output_dir / img_path.relative_to(input_dir)).with_suffix(".png")
        timings = process_file(
            str(img_path),
            str(out_path),
            sticker=args.sticker,
            flood_tolerance=args.flood_tolerance,
            island_tolerance=args.island_tolerance,
            thickness=args.thickness,
            color=args.color,
        )
        print(
            f"{img_path.name}: total={timings.total_s:.3f}s "
            f"(sample={timings.sample_s:.3f}s flood={timings.flood_fill_s:.3f}s "
            f"islands={timings.islands_s:.3f}s despill={timings.despill_s:.3f}s)"
        )


def _run_sticker(args, images, input_dir: Path, output_dir: Path) -> None:
    for img_path in tqdm(images, desc="Stroking", unit="img"):
        out_path = (output_dir / img_path.relative_to(input_dir)).with_suffix(".png")
        t0 = time.perf_counter()
        result = add_sticker_stroke(load_image(img_path), args.thickness, args.color)
        save_png(result, out_path)
        print(f"{img_path.name}: {result.width}x{result.height} in {time.perf_counter() - t0:.3f}s")


def _run_generate(args, images, input_dir: Path, output_dir: Path) -> None:
    for img_path in tqdm(images, desc="Generating", unit="img"):
        out_path = (output_dir / img_path.relative_to(input_dir)).with_suffix(".png")
        mime = mimetypes.guess_type(img_path.name)[0] or "image/png"
        b64 = base64.b64encode(img_path.read_bytes()).decode("utf-8")
        t0 = time.perf_counter()
        keyed = decode_base64_image(remove_background_with_chroma_key(b64, mime).data)
        if args.sticker:
            keyed = add_sticker_stroke(keyed, args.thickness, args.color)
        save_png(keyed, out_path)
        print(f"{img_path.name}: total={time.perf_counter() - t0:.3f}s")


def _save_generated(result: GeneratedImage, out_path: Path) -> Path:
    ext = mimetypes.guess_extension(result.mime_type) or ".png"
    out_path = out_path.with_suffix(ext)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_bytes(base64.b64decode(result.data))
    return out_path


def _run_edit(args, images, input_dir: Path, output_dir: Path) -> None:
    for img_path in tqdm(images, desc="Editing" if args.command == "edit" else "Enhancing", unit="img"):
        mime = mimetypes.guess_type(img_path.name)[0] or "image/png"
        b64 = base64.b64encode(img_path.read_bytes()).decode("utf-8")
        t0 = time.perf_counter()
        if args.command == "edit":
            result = edit_with_prompt(b64, mime, args.prompt, args.aspect_ratio)
        else:
            result = enhance_image(b64, mime, args.aspect_ratio)
        saved = _save_generated(result, output_dir / img_path.relative_to(input_dir))
        print(f"{img_path.name}: -> {saved.name} ({result.mime_type}) in {time.perf_counter() - t0:.3f}s")


def main() -> int:
    load_dotenv()

    parser = argparse.ArgumentParser(description="Green-screen background removal + sticker outlines.")
    parser.add_argument("command", choices=("key", "sticker", "generate", "edit", "enhance"),
                        help="key: chroma-key images already on a green screen; "
                             "sticker: outline already-transparent images; "
                             "generate: Gemini green-screen render, then key; "
                             "edit: free-form Gemini edit with --prompt; "
                             "enhance: lossless-enhance preset.")
    parser.add_argument("--input", required=True, type=str, help="Input directory containing images.")
    parser.add_argument("--output", required=True, type=str, help="Output directory for results.")
    parser.add_argument("--sticker", action="store_true", help="Also add an outline after keying.")
    parser.add_argument("--flood-tolerance", type=float, default=FLOOD_TOLERANCE)
    parser.add_argument("--island-tolerance", type=float, default=ISLAND_TOLERANCE)
    parser.add_argument("--thickness", type=int, default=STROKE_THICKNESS, help="Outline width in px.")
    parser.add_argument("--color", type=str, default=STROKE_COLOR, help="Outline color (e.g. '#FFFFFF', 'white').")
    parser.add_argument("--prompt", type=str, default="", help="Edit instruction for the edit command.")
    parser.add_argument("--aspect-ratio", type=str, default=AspectRatio.SQUARE.value,
                        choices=[r.value for r in AspectRatio], help="Output aspect ratio for edit/enhance.")
    parser.add_argument("--log-level", type=str, default="WARNING")
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if args.command == "edit" and not args.prompt.strip():
        parser.error("Please enter a description of how you want to edit the image (--prompt).")

    input_dir = Path(args.input)
    output_dir = Path(args.output)
    if not input_dir.exists():
        raise FileNotFoundError(f"Input dir not found: {input_dir}")

    images = list(_iter_images(input_dir))
    if not images:
        print(f"No images found under {input_dir}")
        return 0

    runners = {"key": _run_key, "sticker": _run_sticker, "generate": _run_generate,
               "edit": _run_edit, "enhance": _run_edit}

    total0 = time.perf_counter()
    runners[args.command](args, images, input_dir, output_dir)
    total1 = time.perf_counter()
    print(f"Done. {len(images)} images in {total1-total0:.2f}s")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
