import json
from pathlib import Path

import pytest

from pdp_sls.data.generate_data import generate_data
from pdp_sls.data.model import Task, build_problem
from pdp_sls.data.topology import Topology
from pdp_sls.glue.io import (
    load_config,
    load_tasks,
    load_topology,
    load_vehicles,
    save_dataset,
    validate_inputs,
)


def test_load_config_yaml(tmp_path):
    cfg_path = tmp_path / "cfg.yaml"
    cfg_path.write_text("seed: 7\nparams:\n  p: 0.3\n", encoding="utf-8")

    cfg = load_config(cfg_path)
    assert cfg["seed"] == 7
    assert cfg["params"]["p"] == 0.3


def test_load_config_json(tmp_path):
    cfg_path = tmp_path / "cfg.json"
    cfg = {"seed": 5}
    cfg_path.write_text(json.dumps(cfg), encoding="utf-8")

    loaded = load_config(cfg_path)
    assert loaded == cfg


def test_load_config_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_load_tables(tmp_path):
    cities = _write(tmp_path / "cities.csv", "name\nLausanne\nGeneva\nBern\n")
    edges = _write(tmp_path / "edges.csv", "source,target,distance\nLausanne,Geneva,60\nLausanne,Bern,100\n")
    vehicles = _write(tmp_path / "vehicles.csv", "home,capacity,cost_per_km,name\nBern,30,5,red\nGeneva,10,2,\n")
    tasks = _write(tmp_path / "tasks.csv", "pickup,delivery,weight\nGeneva,Bern,3\n")

    topo = load_topology(cities, edges)
    assert topo.size == 3
    assert topo.distance(topo.city("Geneva"), topo.city("Bern")) == 160.0

    fleet = load_vehicles(vehicles, topo)
    assert [v.id for v in fleet] == [0, 1]
    assert fleet[0].home_city == 2
    assert fleet[0].name == "red"
    assert fleet[1].name == ""

    jobs = load_tasks(tasks, topo)
    assert jobs[0].pickup_city == 1
    assert jobs[0].reward == 0.0
    validate_inputs(build_problem(fleet, jobs, topo))


def test_edges_from_coordinates(tmp_path):
    cities = _write(tmp_path / "cities.csv", "name,x,y\nA,0,0\nB,6,8\n")
    edges = _write(tmp_path / "edges.csv", "source,target\nA,B\n")
    topo = load_topology(cities, edges)
    assert topo.distance(0, 1) == pytest.approx(10.0)


def test_edges_without_lengths_need_coordinates(tmp_path):
    cities = _write(tmp_path / "cities.csv", "name\nA\nB\n")
    edges = _write(tmp_path / "edges.csv", "source,target\nA,B\n")
    with pytest.raises(ValueError):
        load_topology(cities, edges)


def test_missing_columns_and_unknown_cities(tmp_path):
    cities = _write(tmp_path / "cities.csv", "name\nA\nB\n")
    edges = _write(tmp_path / "edges.csv", "source,target,distance\nA,B,1\n")
    topo = load_topology(cities, edges)

    with pytest.raises(ValueError):
        load_vehicles(_write(tmp_path / "v.csv", "home,capacity\nA,3\n"), topo)
    with pytest.raises(ValueError):
        load_tasks(_write(tmp_path / "t.csv", "pickup,delivery,weight\nA,Z,1\n"), topo)
    with pytest.raises(ValueError):
        load_topology(cities, _write(tmp_path / "e.csv", "source,target,distance\nA,Q,1\n"))


def test_validate_inputs_rejects_unreachable_cities(fleet):
    topo = Topology(["A", "B", "C"], [(0, 1, 1.0)])
    problem = build_problem(fleet, [Task(id=0, pickup_city=0, delivery_city=2, weight=1.0)], topo)
    with pytest.raises(ValueError):
        validate_inputs(problem)


def test_saved_dataset_loads_back(tmp_path):
    data = generate_data(n_cities=6, n_vehicles=2, n_tasks=4, seed=1)
    files = save_dataset(tmp_path, data["topology"], data["vehicles"], data["tasks"])

    topo = load_topology(tmp_path / files["cities"], tmp_path / files["edges"])
    fleet = load_vehicles(tmp_path / files["vehicles"], topo)
    jobs = load_tasks(tmp_path / files["tasks"], topo)

    assert fleet == data["vehicles"]
    assert jobs == data["tasks"]
    assert topo.dist == pytest.approx(data["topology"].dist)


def test_load_config_empty_and_non_mapping(tmp_path):
    assert load_config(_write(tmp_path / "empty.yaml", "")) == {}
    with pytest.raises(ValueError):
        load_config(_write(tmp_path / "list.yaml", "- 1\n- 2\n"))
