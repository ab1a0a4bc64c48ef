"""Packet capture helpers: engine selection, BPF filter construction and pcap file writing."""