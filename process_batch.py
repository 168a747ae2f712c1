#!/usr/bin/env python3
"""
Batch Exposure Enhancer
Enhance every image of a folder and generate an evaluation report.
"""

import argparse
import json
import logging
import sys
import time
from datetime import datetime
from pathlib import Path

import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from exposure_enhancer.config import load_config
from exposure_enhancer.datasets import create_dataloader
from exposure_enhancer.exceptions import ExposureEnhancerError
from exposure_enhancer.io import save_image
from exposure_enhancer import metrics as iqm

logger = logging.getLogger("process_batch")


def process_batch(input_dir, output_dir, cfg, max_images=None, max_size=None, num_workers=0):
    """Enhance a folder of images and write outputs plus a report."""

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    loader = create_dataloader(input_dir, cfg, num_workers=num_workers,
                               max_size=max_size, max_images=max_images)
    total = len(loader.dataset)
    print(f"Processing {total} images from {input_dir}...")

    results = []
    start_batch_time = time.time()

    for batch in loader:
        for sample in batch:
            image_path = Path(sample['image_path'])
            img, enhanced = sample['original'], sample['output']

            save_image(enhanced, output_dir / f"{image_path.stem}_enhanced.jpg")

            result = {
                'image_name': image_path.name,
                'image_shape': list(img.shape),
                'original_brightness': float(np.mean(img)) / 255.0,
                'dark': bool(sample['dark']),
                'gamma_applied': float(sample['gamma']),
                'processing_time_seconds': sample['processing_time'],
            }
            result.update(iqm.compute_metrics(img, enhanced))
            result['histogram_changes'] = iqm.analyze_histograms(img, enhanced)['changes']
            results.append(result)

            if len(results) % 10 == 0 or len(results) == total:
                print(f"  Processed {len(results)}/{total} images...")

    total_batch_time = time.time() - start_batch_time

    generate_report(results, output_dir, total_batch_time)

    return results


def _avg(results, key):
    vals = [r[key] for r in results if r.get(key) is not None and np.isfinite(r[key])]
    return float(np.mean(vals)) if vals else 0.0


def generate_report(results, output_dir, total_time):
    """Write the JSON report and charts and print a summary."""

    if not results:
        print("No results to report")
        return

    total_images = len(results)
    dark_count = sum(1 for r in results if r['dark'])

    summary = {
        'brightness_enhancement_avg': _avg(results, 'brightness_enhancement'),
        'contrast_enhancement_avg': _avg(results, 'contrast_enhancement'),
        'under_exposure_reduction_avg': _avg(results, 'under_exposure_reduction'),
        'over_exposure_change_avg': _avg(results, 'over_exposure_change'),
        'input_entropy_avg': _avg(results, 'input_entropy'),
        'output_entropy_avg': _avg(results, 'output_entropy'),
        'entropy_ratio_avg': _avg(results, 'entropy_ratio'),
        'colorfulness_avg': _avg(results, 'colorfulness'),
        'psnr_avg': _avg(results, 'psnr'),
        'mae_avg': _avg(results, 'mae'),
        'runtime_avg_seconds': _avg(results, 'processing_time_seconds'),
    }

    create_batch_visualizations(results, output_dir)

    report = {
        'evaluation_info': {
            'total_images': total_images,
            'evaluation_date': datetime.now().isoformat(),
            'total_processing_time_seconds': total_time,
        },
        'lighting_analysis': {
            'dark_images': dark_count,
            'bright_images': total_images - dark_count,
            'dark_percentage': dark_count / total_images * 100,
        },
        'quantitative_analysis': summary,
        'detailed_results': results,
    }

    report_file = output_dir / 'evaluation_report.json'
    with open(report_file, 'w') as f:
        json.dump(report, f, indent=2, default=float)

    print("\n" + "=" * 70)
    print("EXPOSURE ENHANCEMENT EVALUATION REPORT")
    print("=" * 70)
    print(f"Total images: {total_images}")
    print(f"Total processing time: {total_time:.1f} seconds")
    print(f"\nLighting Distribution:")
    print(f"  Dark images (gamma 1/g): {dark_count} ({dark_count/total_images*100:.1f}%)")
    print(f"  Bright images (gamma g): {total_images - dark_count}")
    print(f"\nQuantitative Analysis:")
    for key, value in summary.items():
        print(f"  {key}: {value:.4f}")
    print(f"\nOutput Files:")
    print(f"  Enhanced images: {output_dir}/*_enhanced.jpg")
    print(f"  Report: {report_file}")
    print(f"  Visualizations: {output_dir}/evaluation_charts.png")
    print("=" * 70)


def create_batch_visualizations(results, output_dir):
    """Create charts summarizing the batch."""

    fig, axes = plt.subplots(2, 2, figsize=(12, 10))

    dark_count = sum(1 for r in results if r['dark'])
    axes[0, 0].pie([dark_count, len(results) - dark_count], labels=['Dark', 'Bright'],
                   autopct='%1.1f%%', colors=['darkblue', 'gold'])
    axes[0, 0].set_title(f'Brightness Classification\n({len(results)} images)')

    brightnesses = [r['original_brightness'] for r in results]
    axes[0, 1].hist(brightnesses, bins=15, alpha=0.7, color='blue')
    axes[0, 1].axvline(np.mean(brightnesses), color='red', linestyle='--',
                       label=f'Mean: {np.mean(brightnesses):.3f}')
    axes[0, 1].set_xlabel('Original Brightness')
    axes[0, 1].set_ylabel('Frequency')
    axes[0, 1].set_title('Brightness Distribution')
    axes[0, 1].legend()
    axes[0, 1].grid(True, alpha=0.3)

    improvements = [r['brightness_enhancement'] * 100 for r in results]
    scatter = axes[1, 0].scatter(brightnesses, improvements, alpha=0.6,
                                 c=brightnesses, cmap='viridis', s=50)
    axes[1, 0].axhline(0, color='black', linestyle='-', alpha=0.3)
    axes[1, 0].set_xlabel('Original Brightness')
    axes[1, 0].set_ylabel('Brightness Change (%)')
    axes[1, 0].set_title('Enhancement Effectiveness')
    axes[1, 0].grid(True, alpha=0.3)
    fig.colorbar(scatter, ax=axes[1, 0], label='Original Brightness')

    times = [r['processing_time_seconds'] for r in results]
    axes[1, 1].hist(times, bins=12, alpha=0.7, color='green')
    axes[1, 1].axvline(np.mean(times), color='red', linestyle='--',
                       label=f'Mean: {np.mean(times):.3f}s')
    axes[1, 1].set_xlabel('Processing Time (seconds)')
    axes[1, 1].set_ylabel('Frequency')
    axes[1, 1].set_title('Processing Performance')
    axes[1, 1].legend()
    axes[1, 1].grid(True, alpha=0.3)

    fig.tight_layout()
    fig.savefig(output_dir / 'evaluation_charts.png', dpi=150, bbox_inches='tight')
    plt.close(fig)


def main(argv=None):
    """Main function."""
    parser = argparse.ArgumentParser(description="Enhance a folder of images with synthetic exposure fusion.")
    parser.add_argument("input_dir", help="directory of input images")
    parser.add_argument("--output", default="batch_results", help="output directory")
    parser.add_argument("--config", default=None, help="JSON configuration file")
    parser.add_argument("--max-images", type=int, default=None, help="process at most this many images")
    parser.add_argument("--max-size", type=int, default=None, help="shrink images to this longest side")
    parser.add_argument("--workers", type=int, default=0, help="parallel worker processes")
    parser.add_argument("--debug", action="store_true", help="print debug logs")
    args = parser.parse_args(argv)

    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr,
                        level=logging.DEBUG if args.debug else logging.INFO)

    try:
        cfg = load_config(args.config)
        results = process_batch(args.input_dir, args.output, cfg, args.max_images,
                                args.max_size, args.workers)
    except (ExposureEnhancerError, FileNotFoundError) as e:
        logger.error("%s", e)
        return 1

    if not results:
        print("No images were processed")
        return 1
    print(f"Processed {len(results)} images successfully")
    return 0


if __name__ == "__main__":
    sys.exit(main())
