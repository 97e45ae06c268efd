from __future__ import annotations

from sim_stochastic_crm import build_simulator, generate_report
from sim_stochastic_crm.scenario_setup import DEFAULT_SCENARIO_PATH, build_run_settings


def main() -> None:
    simulator = build_simulator(DEFAULT_SCENARIO_PATH)
    settings = build_run_settings(DEFAULT_SCENARIO_PATH)

    results = simulator.run(
        n_iter=200,
        model_options=settings.model_options,
        seed=123,
    )
    output_dir = generate_report(
        scenario_name="kittiwake_offshore_default",
        results=results,
        bird=simulator.bird,
        turbine=simulator.turbine,
        wind_farm=simulator.wind_farm,
    )
    print(f"Report salvato in: {output_dir}")


if __name__ == "__main__":
    main()
