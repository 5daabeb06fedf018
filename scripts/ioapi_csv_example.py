"""
Пример: запись и чтение CSV через bucketfs.base.ioapi.

Плюс:
- один код для локального каталога и бакета S3 (если задан BUCKETFS_BUCKET)

Запуск:
  python scripts/ioapi_csv_example.py --out "reports/sample.csv"
"""

from __future__ import annotations

import argparse
import logging

import pandas as pd

from bucketfs.base import runtime
from bucketfs.base import ioapi as ia

logger = logging.getLogger("ioapi_csv_example")


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("--out", required=True, help="Path of the .csv file inside the filesystem.")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    providers = runtime.get_providers()
    logger.info("providers source = %s", providers.source)

    df = pd.DataFrame(
        {
            "A": [1, 2, 3],
            "B": ["one", "two", "three"],
        }
    )

    ia.csv.write_df(args.out, df)
    logger.info("write ok path=%s rows=%s cols=%s", args.out, len(df), len(df.columns))

    back = ia.csv.read_df(args.out)
    logger.info("read ok path=%s rows=%s cols=%s", args.out, len(back), len(back.columns))
    print(back.head())

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
