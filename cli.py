import json
import sys
from pathlib import Path

from natal_engine.services.chart import calculate_chart, chart_fingerprint
from natal_engine.services.errors import ChartError
from natal_engine.services.models import BirthInput


def main() -> None:
    in_path = Path(sys.argv[1])
    out_path = Path(sys.argv[2])
    data = json.loads(in_path.read_text(encoding="utf-8"))
    house_system = data.pop("house_system", "Placidus")
    model = data.pop("model", "calibrated")
    birth = BirthInput(**data)
    try:
        chart = calculate_chart(birth, house_system, model=model)
    except ChartError as exc:
        print(f"{type(exc).__name__}: {exc}", file=sys.stderr)
        sys.exit(2)
    output = {"chart_id": chart_fingerprint(birth, house_system, model), **chart.to_dict()}
    out_path.write_text(json.dumps(output, indent=2, ensure_ascii=False), encoding="utf-8")
    print(f"Wrote chart JSON → {out_path}")


if __name__ == "__main__":
    if len(sys.argv) < 3:
        print("Usage: python cli.py birth.json chart.json")
        sys.exit(1)
    main()
