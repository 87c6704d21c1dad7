# Sort the images of a directory into N class directories by visual similarity.
#
#   tensort <target_dir> <class_count> [-n | --no-names]
#
# 1. Embed every image with an ImageNet classifier (softmax output)
# 2. Pairwise cosine similarities of all embeddings
# 3. Greedy clustering into <class_count> classes
# 4. Name each class after the ImageNet label of its mean embedding
# 5. Move the images into one sub-directory per class

import argparse
import logging
import sys

from classify import ImageNetLabeler, class_names
from clustering import cluster_embeddings
from config import DEFAULT_MODEL, MODELS, SortConfig
from embed import ImageEmbedder, collect_image_paths, gen_image_embeddings
from errors import TensortError
from organize import format_classified_images, format_missed_images, update_target_dir
from similarity import pairwise_similarities


def positive_int(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid class count: {value!r}")
    if n < 1:
        raise argparse.ArgumentTypeError(f"class count must be at least 1, got {n}")
    return n


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tensort",
        description="Sort images into class directories by visual similarity.",
        epilog="Example: tensort /path/to/images_dir 5 -n",
    )
    parser.add_argument("target_dir", help="Path to the target directory")
    parser.add_argument("class_count", type=positive_int, help="Number of classes")
    parser.add_argument("-n", "--no-names", action="store_true",
                        help="Do not generate class names, use 'Class 1', 'Class 2', ...")
    parser.add_argument("--model", default=DEFAULT_MODEL, choices=sorted(MODELS),
                        help="ImageNet classifier used for embeddings")
    parser.add_argument("--dry-run", action="store_true",
                        help="Print the classes without moving any file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def parse_args(argv=None) -> SortConfig:
    args = build_parser().parse_args(argv)
    return SortConfig(
        target_dir=args.target_dir,
        class_count=args.class_count,
        gen_names=not args.no_names,
        model_name=args.model,
        dry_run=args.dry_run,
        verbose=args.verbose,
    )


def run(config: SortConfig, embedder=None, labeler=None) -> int:
    print(config)

    # fail on a bad target before paying for the model load
    collect_image_paths(config.target_dir)

    if embedder is None:
        print("Loading model...")
        embedder = ImageEmbedder(model_name=config.model_name)
    print(embedder)

    print(f"Scanning images under: {config.target_dir}")
    result = gen_image_embeddings(config.target_dir, embedder, progress=True)
    print(f"Embedded {len(result.embeddings)} images, {len(result.missed_image_paths)} failed.\n")

    if result.missed_image_paths:
        print(format_missed_images(result.missed_image_paths))
        print()

    if not result.embeddings:
        print("No images to sort.")
        return 0

    similarities = pairwise_similarities(result.embeddings)
    table = cluster_embeddings(similarities, len(result.embeddings), config.class_count)

    if config.gen_names and labeler is None:
        labeler = ImageNetLabeler(model_name=config.model_name)
    names = class_names(result.embeddings, table, top_label=labeler, gen_names=config.gen_names)

    print(format_classified_images(table, result.image_paths, names))

    if config.dry_run:
        print("Dry run, no files moved.")
        return 0

    moved = update_target_dir(config.target_dir, result.image_paths, names, table)
    print(f"Moved {sum(len(v) for v in moved.values())} images into {len(moved)} class directories.")
    return 0


def main(argv=None, embedder=None, labeler=None) -> int:
    config = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if config.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        return run(config, embedder=embedder, labeler=labeler)
    except TensortError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
