"""Write a multi-scale synthetic data set with labelled outliers to CSV."""
import argparse
import logging
import os
import sys

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path: sys.path.insert(0, ROOT)

from ecodlab.datasets.synthetic import generate_anomaly_data, write_anomaly_data


def parse_args(argv=None):
    p = argparse.ArgumentParser(description=__doc__)
    p.add_argument("--n-samples", type=int, default=500)
    p.add_argument("--n-features", type=int, default=15)
    p.add_argument("--outlier-fraction", type=float, default=0.05)
    p.add_argument("--seed", type=int, default=123)
    p.add_argument("--output-dir", default="data")
    return p.parse_args(argv)


def main(argv=None):
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    args = parse_args(argv)
    result = generate_anomaly_data(args.n_samples, args.n_features, args.outlier_fraction, args.seed)
    data_file, outlier_file = write_anomaly_data(result, args.output_dir)
    print(f"Samples: {len(result.labels)}  features: {result.data.shape[1]}  "
          f"outliers: {int(result.labels.sum())}")
    print(f"Outlier rows (0-based): {result.outlier_rows.tolist()}")
    print(f"Written: {data_file}, {outlier_file}")


if __name__ == "__main__":
    main()
